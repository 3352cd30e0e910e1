from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from .address_extractor import extract_ip
from .exceptions import GeoLookupError
from .hex_indexer import HexIndexer
from .logging_utils import get_logger
from .models import AggregationStats, GeoCoordinate, HexInfo, RelayRecord


class CoordinateResolver(Protocol):
    def resolve(self, ip: str) -> Optional[GeoCoordinate]:
        ...


class RelayMapAggregator:
    """Count relays per H3 cell and attach each cell's geometry."""

    def __init__(self, resolver: CoordinateResolver, indexer: HexIndexer) -> None:
        self._resolver = resolver
        self._indexer = indexer
        self._logger = get_logger("relay_map")

    def aggregate(self, relays: Iterable[RelayRecord]) -> List[HexInfo]:
        hexes, _ = self.aggregate_with_stats(relays)
        return hexes

    def aggregate_with_stats(self, relays: Iterable[RelayRecord]) -> Tuple[List[HexInfo], AggregationStats]:
        stats = AggregationStats()
        counts: Dict[str, int] = defaultdict(int)

        for relay in relays:
            stats.relays_seen += 1
            ip = extract_ip(relay.or_addresses)
            if ip is None:
                stats.without_address += 1
                continue
            # one contribution per relay, even when relays share an address
            try:
                coordinate = self._resolver.resolve(ip)
            except GeoLookupError as error:
                stats.lookup_failures += 1
                self._logger.debug("Skipping relay %s: %s", relay.fingerprint, error)
                continue
            if coordinate is None:
                stats.geocode_misses += 1
                self._logger.debug("No geolocation for relay %s (%s)", relay.fingerprint, ip)
                continue
            cell = self._indexer.coordinate_to_cell(coordinate.latitude, coordinate.longitude)
            counts[cell] += 1
            stats.placed += 1

        result: List[HexInfo] = []
        for cell in sorted(counts):
            result.append(
                HexInfo(
                    index=cell,
                    relay_count=counts[cell],
                    geo=self._indexer.cell_to_center(cell),
                    boundary=tuple(self._indexer.cell_to_boundary(cell)),
                )
            )
        stats.cells = len(result)
        self._logger.info(
            "Placed %d of %d relays into %d cells (res %d); %d without address, %d misses, %d lookup failures",
            stats.placed,
            stats.relays_seen,
            stats.cells,
            self._indexer.resolution,
            stats.without_address,
            stats.geocode_misses,
            stats.lookup_failures,
        )
        return result, stats
