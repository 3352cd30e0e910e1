from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

_MIN_HEXAGON_RESOLUTION = 0
_MAX_HEXAGON_RESOLUTION = 15
_TRUE_VALUES = {"1", "true", "yes", "on"}


def _expand_path(value: Path | str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def _normalize_log_level(level: str) -> str:
    normalized = level.upper()
    allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
    if normalized not in allowed:
        raise ValueError(f"Unsupported log level: {level}")
    return normalized


def _validate_hexagon_resolution(value: int) -> int:
    if not (_MIN_HEXAGON_RESOLUTION <= value <= _MAX_HEXAGON_RESOLUTION):
        raise ValueError(
            f"hexagon_resolution must be between {_MIN_HEXAGON_RESOLUTION} and "
            f"{_MAX_HEXAGON_RESOLUTION}, got {value}"
        )
    return value


def _with_scheme(address: str) -> str:
    if "://" in address:
        return address.rstrip("/")
    return f"http://{address}".rstrip("/")


@dataclass(frozen=True)
class RelayMapSettings:
    """Process-wide configuration, built once at startup."""

    host: str = "0.0.0.0"  # nosec B104
    port: int = 3000

    victoria_metrics_address: str = "http://localhost:8428"
    onionoo_instance: str = "10.1.244.1:9090"
    onionoo_protocol: str = "http://"

    cluster: str = "local"
    env: str = "main"
    job: str = "consulagentonionoo"

    range_from: str = "-7d"
    range_to: str = "now"
    range_interval: str = "6h"

    hexagon_resolution: int = 4
    geolite_db_path: Path = Path("./data/GeoLite2-City.mmdb")

    upstream_timeout_seconds: float = 30.0
    upstream_retries: int = 2
    upstream_retry_delay_seconds: float = 1.0

    log_level: str = "INFO"
    log_verbose: bool = False

    def __post_init__(self) -> None:
        _validate_hexagon_resolution(self.hexagon_resolution)
        object.__setattr__(self, "geolite_db_path", _expand_path(self.geolite_db_path))
        object.__setattr__(self, "log_level", _normalize_log_level(self.log_level))
        if not (0 < self.port < 65_536):
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.upstream_timeout_seconds <= 0:
            raise ValueError("upstream_timeout_seconds must be positive")
        if self.upstream_retries < 0:
            raise ValueError("upstream_retries must be non-negative")
        if self.upstream_retry_delay_seconds < 0:
            raise ValueError("upstream_retry_delay_seconds must be non-negative")

    @property
    def onionoo_url(self) -> str:
        return f"{self.onionoo_protocol}{self.onionoo_instance}".rstrip("/")

    @property
    def victoria_metrics_url(self) -> str:
        return _with_scheme(self.victoria_metrics_address)


# environment variable -> (settings field, converter)
_ENV_FIELDS = {
    "HOST": ("host", str),
    "PORT": ("port", int),
    "VICTORIA_METRICS_ADDRESS": ("victoria_metrics_address", str),
    "ONIONOO_INSTANCE": ("onionoo_instance", str),
    "ONIONOO_PROTOCOL": ("onionoo_protocol", str),
    "CLUSTER": ("cluster", str),
    "ENV": ("env", str),
    "JOB": ("job", str),
    "FROM": ("range_from", str),
    "TO": ("range_to", str),
    "INTERVAL": ("range_interval", str),
    "HEXAGON_RESOLUTION": ("hexagon_resolution", int),
    "GEOLITE_DB_PATH": ("geolite_db_path", Path),
    "UPSTREAM_TIMEOUT_SECONDS": ("upstream_timeout_seconds", float),
    "UPSTREAM_RETRIES": ("upstream_retries", int),
    "UPSTREAM_RETRY_DELAY_SECONDS": ("upstream_retry_delay_seconds", float),
    "LOG_LEVEL": ("log_level", str),
    "LOG_VERBOSE": ("log_verbose", lambda value: value.strip().lower() in _TRUE_VALUES),
}


def load_settings(
    args: argparse.Namespace | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RelayMapSettings:
    environ = os.environ if environ is None else environ
    overrides = {}
    for key, (field_name, convert) in _ENV_FIELDS.items():
        raw = environ.get(key)
        if raw is None or raw == "":
            continue
        try:
            overrides[field_name] = convert(raw)
        except ValueError as error:
            raise ValueError(f"Invalid {key} value: {raw}") from error

    if args is not None:
        if getattr(args, "port", None) is not None:
            overrides["port"] = args.port
        if getattr(args, "hexagon_resolution", None) is not None:
            overrides["hexagon_resolution"] = args.hexagon_resolution

    return replace(RelayMapSettings(), **overrides)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tor relay map and metrics API")
    parser.add_argument(
        "--port",
        dest="port",
        type=int,
        default=None,
        help="Port for the HTTP server",
    )
    parser.add_argument(
        "--hexagon-resolution",
        dest="hexagon_resolution",
        type=int,
        default=None,
        help="H3 resolution used by the relay map",
    )
    return parser
