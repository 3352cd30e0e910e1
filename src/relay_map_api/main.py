from __future__ import annotations

import sys

from .api_server import create_app
from .config_manager import build_arg_parser, load_settings
from .exceptions import GeoLookupError
from .geo_resolver import GeoResolver
from .logging_utils import configure_logging, get_logger


def main() -> None:
    parser = build_arg_parser()
    args = parser.parse_args()
    settings = load_settings(args)
    configure_logging(settings)
    logger = get_logger("main")

    try:
        resolver = GeoResolver.open(settings.geolite_db_path)
    except GeoLookupError as error:
        logger.critical("%s", error)
        sys.exit(1)

    with resolver:
        app = create_app(settings, resolver)
        logger.info(
            "Relay map API running at http://%s:%s (hexagon resolution %d)",
            settings.host,
            settings.port,
            settings.hexagon_resolution,
        )
        app.run(host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
