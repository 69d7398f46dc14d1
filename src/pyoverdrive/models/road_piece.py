"""Road piece types.

Anki assigns many numeric ids to physically equivalent track pieces
(e.g. several straight variants).  :class:`RoadPieceType` abstracts
from those ids.
"""

from __future__ import annotations

import enum

from pyoverdrive.exceptions import UnknownRoadPieceError

START_ID = 33
FINISH_ID = 34


class RoadPieceType(enum.StrEnum):
    """Kind of physical track section."""

    START = "START"
    FINISH = "FINISH"
    STRAIGHT = "STRAIGHT"
    CORNER = "CORNER"
    INTERSECTION = "INTERSECTION"

    @classmethod
    def from_id(cls, road_piece_id: int) -> RoadPieceType:
        """Map a numeric road piece id to its type.

        Raises :class:`UnknownRoadPieceError` for ids not in the table.
        """
        piece = _ID_TO_TYPE.get(int(road_piece_id))
        if piece is None:
            raise UnknownRoadPieceError(int(road_piece_id))
        return piece

    @property
    def ids(self) -> tuple[int, ...]:
        """All numeric ids that map to this type."""
        return tuple(piece_id for piece_id, piece in _ID_TO_TYPE.items() if piece is self)

    def normalized(self) -> RoadPieceType:
        """START and FINISH are two markers on one straight piece."""
        if self in (RoadPieceType.START, RoadPieceType.FINISH):
            return RoadPieceType.STRAIGHT
        return self

    @property
    def is_start_or_finish(self) -> bool:
        return self in (RoadPieceType.START, RoadPieceType.FINISH)


_ID_TO_TYPE: dict[int, RoadPieceType] = {
    START_ID: RoadPieceType.START,
    FINISH_ID: RoadPieceType.FINISH,
    36: RoadPieceType.STRAIGHT,
    39: RoadPieceType.STRAIGHT,
    40: RoadPieceType.STRAIGHT,
    48: RoadPieceType.STRAIGHT,
    51: RoadPieceType.STRAIGHT,
    17: RoadPieceType.CORNER,
    18: RoadPieceType.CORNER,
    20: RoadPieceType.CORNER,
    23: RoadPieceType.CORNER,
    24: RoadPieceType.CORNER,
    27: RoadPieceType.CORNER,
    10: RoadPieceType.INTERSECTION,
}


def alternate_start_finish_id(road_piece_id: int) -> int:
    """Return the partner id for START/FINISH, or *road_piece_id* unchanged."""
    if road_piece_id == START_ID:
        return FINISH_ID
    if road_piece_id == FINISH_ID:
        return START_ID
    return road_piece_id
