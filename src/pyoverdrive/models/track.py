"""Track map data types: headings, pieces, positions."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import Field, field_validator

from pyoverdrive.models._base import OverdriveBaseModel
from pyoverdrive.models.road_piece import RoadPieceType


class Heading(enum.IntEnum):
    """Grid heading.

    Members are declared clockwise; turning right is ``+1`` and turning
    left ``-1`` modulo 4.
    """

    EAST = 0
    SOUTH = 1
    WEST = 2
    NORTH = 3

    def turn_right(self) -> Heading:
        return Heading((self.value + 1) % 4)

    def turn_left(self) -> Heading:
        return Heading((self.value + 3) % 4)

    @property
    def delta(self) -> tuple[int, int]:
        """Unit grid step ``(dx, dy)`` for this heading (north is +y)."""
        return _DELTAS[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Heading.EAST, Heading.WEST)


_DELTAS: dict[Heading, tuple[int, int]] = {
    Heading.EAST: (1, 0),
    Heading.SOUTH: (0, -1),
    Heading.WEST: (-1, 0),
    Heading.NORTH: (0, 1),
}


@dataclass(frozen=True, slots=True)
class VehiclePosition:
    """Dead-reckoning state: grid cell and current heading."""

    x: int
    y: int
    heading: Heading

    def step(self) -> tuple[int, int]:
        dx, dy = self.heading.delta
        return self.x + dx, self.y + dy


class TrackPiece(OverdriveBaseModel):
    """One inferred physical track piece on the grid."""

    x: int
    y: int
    road_piece: RoadPieceType
    enter_heading: Heading
    exit_heading: Heading
    road_piece_id: int = -1
    """Raw Anki id of the piece, ``-1`` when unknown."""
    start_location: int = -1
    """First location id observed on this piece, ``-1`` when unknown."""
    end_location: int = -1
    """Last location id observed on this piece, ``-1`` when unknown."""
    glyph: str = Field(default="?", min_length=1, max_length=1)

    @field_validator("enter_heading", "exit_heading", mode="before")
    @classmethod
    def _coerce_heading(cls, value: object) -> object:
        if isinstance(value, str) and value in Heading.__members__:
            return Heading[value]
        return value

    @property
    def coordinate(self) -> tuple[int, int]:
        return self.x, self.y

    @property
    def has_location_range(self) -> bool:
        return self.start_location != -1 and self.end_location != -1

    @property
    def location_bounds(self) -> tuple[int, int]:
        """``(low, high)`` of the observed location range.

        Only meaningful when :attr:`has_location_range` is true.
        """
        return min(self.start_location, self.end_location), max(self.start_location, self.end_location)

    def with_location(self, location: int) -> TrackPiece:
        """Return a copy whose location range also covers *location*."""
        if not self.has_location_range:
            return self.model_copy(update={"start_location": location, "end_location": location})
        return self.model_copy(update={"end_location": location})

    def shift(self, dx: int, dy: int) -> TrackPiece:
        return self.model_copy(update={"x": self.x + dx, "y": self.y + dy})

    def __str__(self) -> str:
        return f"({self.x},{self.y}) {self.road_piece} [{self.glyph}]"


class PieceLocation(OverdriveBaseModel):
    """A track piece plus the relative progress along it."""

    piece: TrackPiece
    progress: float = Field(ge=0.0, le=1.0)
    """0.0 at the start of the piece's location range, 1.0 at its end."""

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp(cls, value: object) -> object:
        if isinstance(value, (int, float)):
            return max(0.0, min(1.0, float(value)))
        return value
