"""
Data models shared by the relay map pipeline and the HTTP layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class GeoCoordinate:
    """A resolved (latitude, longitude) pair in degrees."""
    latitude: float
    longitude: float

    def to_list(self) -> List[float]:
        return [self.latitude, self.longitude]


@dataclass(frozen=True)
class RelayRecord:
    """Subset of an Onionoo relay details document"""
    fingerprint: str
    running: bool = False
    consensus_weight: int = 0
    or_addresses: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RelayRecord':
        """Create from an Onionoo relay object"""
        return cls(
            fingerprint=data.get('fingerprint', ''),
            running=bool(data.get('running', False)),
            consensus_weight=int(data.get('consensus_weight') or 0),
            or_addresses=tuple(data.get('or_addresses') or ()),
        )

    def to_summary(self) -> Dict[str, Any]:
        return {
            'fingerprint': self.fingerprint,
            'running': self.running,
            'consensus_weight': self.consensus_weight,
        }


@dataclass(frozen=True)
class HexInfo:
    """One occupied hexagon of the relay map"""
    index: str
    relay_count: int
    geo: GeoCoordinate
    boundary: Tuple[GeoCoordinate, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'index': self.index,
            'relayCount': self.relay_count,
            'geo': self.geo.to_list(),
            'boundary': [vertex.to_list() for vertex in self.boundary],
        }


@dataclass
class AggregationStats:
    """Counters collected during one relay map run"""
    relays_seen: int = 0
    without_address: int = 0
    geocode_misses: int = 0
    lookup_failures: int = 0
    placed: int = 0
    cells: int = 0


@dataclass
class ApiResponse:
    """Standard API error/success envelope"""
    success: bool
    message: str = ""
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        result = {
            'success': self.success,
            'message': self.message
        }
        if self.data:
            result.update(self.data)
        if self.error:
            result['error'] = self.error
        return result


def create_error_response(message: str, error: Optional[str] = None) -> Dict[str, Any]:
    """Create error API response"""
    return ApiResponse(success=False, message=message, error=error).to_dict()
