from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

install_requires = [
    "aiohttp==3.12.15",
    "flask[async]>=3.0",
    "geoip2>=4.8",
    "maxminddb>=2.5",
    "h3>=4.1",
    "pydantic>=2.5",
]

setup(
    name="tor-relay-map-api",
    version="0.1.0",
    description="HTTP API for Tor relay metrics and an H3 density map of relays",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=install_requires,
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-asyncio>=0.21",
            "ruff>=0.1.0",
        ],
    },
    license="MIT",
    entry_points={
        "console_scripts": [
            "relay-map-api = relay_map_api.main:main",
        ],
    },
)
