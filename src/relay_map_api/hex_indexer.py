"""H3 hexagon indexing at a single, fixed resolution."""

from __future__ import annotations

import math
from typing import List

import h3

from .exceptions import InvalidCellError, InvalidCoordinateError
from .models import GeoCoordinate

MIN_RESOLUTION = 0
MAX_RESOLUTION = 15


class HexIndexer:
    """Map coordinates to H3 cells and cells back to their geometry.

    Boundaries are returned the way ``h3.cell_to_boundary`` produces them:
    counter-clockwise and open, i.e. the first vertex is not repeated at the
    end of the sequence.
    """

    def __init__(self, resolution: int) -> None:
        if not (MIN_RESOLUTION <= resolution <= MAX_RESOLUTION):
            raise ValueError(
                f"H3 resolution must be between {MIN_RESOLUTION} and {MAX_RESOLUTION}, got {resolution}"
            )
        self._resolution = resolution

    @property
    def resolution(self) -> int:
        return self._resolution

    def coordinate_to_cell(self, latitude: float, longitude: float) -> str:
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            raise InvalidCoordinateError(f"Coordinate must be finite, got ({latitude}, {longitude})")
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            raise InvalidCoordinateError(f"Coordinate out of range: ({latitude}, {longitude})")
        return h3.latlng_to_cell(latitude, longitude, self._resolution)

    def cell_to_center(self, cell: str) -> GeoCoordinate:
        self._validate_cell(cell)
        latitude, longitude = h3.cell_to_latlng(cell)
        return GeoCoordinate(latitude=latitude, longitude=longitude)

    def cell_to_boundary(self, cell: str) -> List[GeoCoordinate]:
        self._validate_cell(cell)
        return [
            GeoCoordinate(latitude=latitude, longitude=longitude)
            for latitude, longitude in h3.cell_to_boundary(cell)
        ]

    def _validate_cell(self, cell: str) -> None:
        if not isinstance(cell, str) or not h3.is_valid_cell(cell):
            raise InvalidCellError(f"Not a valid H3 cell identifier: {cell!r}")
        cell_resolution = h3.get_resolution(cell)
        if cell_resolution != self._resolution:
            raise InvalidCellError(
                f"Cell {cell} has resolution {cell_resolution}, expected {self._resolution}"
            )
