class RelayMapError(Exception):
    """Base exception for relay map API failures."""


class UpstreamUnavailableError(RelayMapError):
    """Raised when Onionoo or the metrics store cannot be queried."""


class RelayNotFoundError(RelayMapError):
    """Raised when a relay fingerprint is absent from the directory."""


class GeoLookupError(RelayMapError):
    """Raised when the geolocation database lookup itself fails."""


class HexIndexError(RelayMapError):
    """Base exception for invalid hexagon indexer input."""


class InvalidCellError(HexIndexError):
    """Raised for malformed or cross-resolution cell identifiers."""


class InvalidCoordinateError(HexIndexError):
    """Raised when a coordinate is outside the valid lat/lon domain."""
