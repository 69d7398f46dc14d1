"""Spatial lookup over a finished track map.

Once mapping is complete every piece knows the range of location ids it
covers.  :class:`SpatialLookupIndex` expands those ranges into a table
keyed by ``(location, road_piece_id)`` and ``(location, road_piece_type)``
so a live position update can be turned into a piece plus the relative
progress along it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from functools import cached_property

from pydantic import ConfigDict, Field, computed_field

from pyoverdrive.models._base import OverdriveBaseModel, now_ms
from pyoverdrive.models.road_piece import RoadPieceType, alternate_start_finish_id
from pyoverdrive.models.track import PieceLocation, TrackPiece

MAP_FORMAT_VERSION = "1.0"


def _progress(location_id: int, low: int, high: int) -> float:
    if high <= low:
        return 0.5
    return max(0.0, min(1.0, (location_id - low) / (high - low)))


def _range_distance(location_id: int, low: int, high: int) -> int:
    if location_id < low:
        return low - location_id
    if location_id > high:
        return location_id - high
    return 0


class SpatialLookupIndex:
    """Location to piece/progress index, built once from a piece list."""

    def __init__(self, pieces: Iterable[TrackPiece]) -> None:
        self._pieces = tuple(piece for piece in pieces if piece.has_location_range)
        self._by_id: dict[tuple[int, int], PieceLocation] = {}
        self._by_type: dict[tuple[int, RoadPieceType], PieceLocation] = {}
        for piece in self._pieces:
            low, high = piece.location_bounds
            for location_id in range(low, high + 1):
                entry = PieceLocation(piece=piece, progress=_progress(location_id, low, high))
                self._by_id[(location_id, piece.road_piece_id)] = entry
                self._by_type[(location_id, piece.road_piece)] = entry

    def __len__(self) -> int:
        return len(self._by_id)

    def find_by_location_and_id(self, location_id: int, road_piece_id: int) -> PieceLocation | None:
        """Resolve a position update to a piece.

        Tries, in order: the exact key, the START/FINISH partner id, the
        nearest piece with the same id, the nearest piece with the partner
        id, and finally the nearest piece of the same type.
        """
        alternate_id = alternate_start_finish_id(road_piece_id)

        result = self._by_id.get((location_id, road_piece_id))
        if result is None and alternate_id != road_piece_id:
            result = self._by_id.get((location_id, alternate_id))
        if result is None:
            result = self._nearest(location_id, lambda piece: piece.road_piece_id == road_piece_id)
        if result is None and alternate_id != road_piece_id:
            result = self._nearest(location_id, lambda piece: piece.road_piece_id == alternate_id)
        if result is None:
            try:
                road_piece = RoadPieceType.from_id(road_piece_id)
            except ValueError:
                return None
            result = self._nearest(location_id, lambda piece: piece.road_piece is road_piece)
        return result

    def find_by_location(self, location_id: int, road_piece: RoadPieceType) -> PieceLocation | None:
        result = self._by_type.get((location_id, road_piece))
        if result is None:
            result = self._nearest(location_id, lambda piece: piece.road_piece is road_piece)
        return result

    def _nearest(self, location_id: int, matches: Callable[[TrackPiece], bool]) -> PieceLocation | None:
        nearest: TrackPiece | None = None
        best = -1
        for piece in self._pieces:
            if not matches(piece):
                continue
            distance = _range_distance(location_id, *piece.location_bounds)
            if nearest is None or distance < best:
                nearest, best = piece, distance
        if nearest is None:
            return None
        low, high = nearest.location_bounds
        return PieceLocation(piece=nearest, progress=_progress(location_id, low, high))


class MapBounds(OverdriveBaseModel):
    min_x: int = 0
    max_x: int = 0
    min_y: int = 0
    max_y: int = 0


class TrackMapData(OverdriveBaseModel):
    """A finished track map: pieces plus metadata.

    Serialises to JSON with ``model_dump_json()``; the derived ``bounds``
    are included in the output and ignored on input.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", validate_default=True)

    pieces: tuple[TrackPiece, ...] = ()
    version: str = MAP_FORMAT_VERSION
    timestamp: int = Field(default_factory=now_ms)
    """Epoch milliseconds at which the map was created."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def bounds(self) -> MapBounds:
        if not self.pieces:
            return MapBounds()
        xs = [piece.x for piece in self.pieces]
        ys = [piece.y for piece in self.pieces]
        return MapBounds(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))

    @cached_property
    def index(self) -> SpatialLookupIndex:
        return SpatialLookupIndex(self.pieces)

    @property
    def piece_count(self) -> int:
        return len(self.pieces)

    def find_by_location_and_id(self, location_id: int, road_piece_id: int) -> PieceLocation | None:
        return self.index.find_by_location_and_id(location_id, road_piece_id)

    def find_by_location(self, location_id: int, road_piece: RoadPieceType) -> PieceLocation | None:
        return self.index.find_by_location(location_id, road_piece)

    def stats(self) -> str:
        bounds = self.bounds
        return "\n".join(
            [
                f"Version: {self.version}",
                f"Timestamp: {self.timestamp}",
                f"Total pieces: {self.piece_count}",
                f"Bounds: X[{bounds.min_x}, {bounds.max_x}], Y[{bounds.min_y}, {bounds.max_y}]",
                f"Mapped location combinations: {len(self.index)}",
            ]
        )
