from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

import geoip2.database
import geoip2.errors
import maxminddb

from .exceptions import GeoLookupError
from .logging_utils import get_logger
from .models import GeoCoordinate


class GeoResolver:
    """Resolve IP addresses to coordinates with a GeoLite2 City database.

    A miss yields ``None``. A failing lookup raises :class:`GeoLookupError`
    so that callers can tell "no data" apart from "lookup broken".
    """

    def __init__(self, reader: geoip2.database.Reader) -> None:
        self._reader = reader
        self._logger = get_logger("geo")

    @classmethod
    def open(cls, database_path: Path) -> "GeoResolver":
        try:
            reader = geoip2.database.Reader(str(database_path))
        except (OSError, maxminddb.InvalidDatabaseError) as error:
            raise GeoLookupError(f"Unable to open GeoLite database {database_path}: {error}") from error
        database_type = reader.metadata().database_type
        if "City" not in database_type:
            reader.close()
            raise GeoLookupError(f"{database_path} is a {database_type} database, a City database is required")
        return cls(reader)

    def resolve(self, ip: str) -> Optional[GeoCoordinate]:
        try:
            response = self._reader.city(ip)
        except geoip2.errors.AddressNotFoundError:
            return None
        except ValueError as error:
            raise GeoLookupError(f"Malformed IP address {ip!r}") from error
        except (TypeError, geoip2.errors.GeoIP2Error, maxminddb.InvalidDatabaseError) as error:
            raise GeoLookupError(f"GeoLite lookup failed for {ip}: {error}") from error

        latitude = response.location.latitude
        longitude = response.location.longitude
        if latitude is None or longitude is None:
            self._logger.debug("GeoLite record for %s carries no coordinates", ip)
            return None
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            return None
        return GeoCoordinate(latitude=float(latitude), longitude=float(longitude))

    def close(self) -> None:
        self._reader.close()

    def __enter__(self) -> "GeoResolver":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
