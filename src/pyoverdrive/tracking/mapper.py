"""Dead-reckoning track mapper.

The track is modelled as a grid where every physical piece occupies one
cell.  Starting at ``(0, 0)`` the mapper steps one cell per newly
discovered piece in the current heading; corners rotate the heading left
while location ids ascend and right while they descend.  Returning to the
first piece's cell after at least four pieces closes the loop.
"""

from __future__ import annotations

import enum
import logging
from typing import Protocol

from pyoverdrive.models.road_piece import RoadPieceType
from pyoverdrive.models.track import Heading, TrackPiece, VehiclePosition

_logger = logging.getLogger(__name__)

MIN_LOOP_PIECES = 4

_ORIGIN = (0, 0)


class MapperState(enum.StrEnum):
    IDLE = "idle"
    GATHERING = "gathering"
    COMPLETED = "completed"


class TrackMappingCallback(Protocol):
    def on_piece_added(self, piece: TrackPiece) -> None: ...

    def on_track_complete(self, pieces: tuple[TrackPiece, ...]) -> None: ...


def glyph_for(road_piece: RoadPieceType, heading: Heading, ascending: bool) -> str:
    """ASCII glyph of a piece entered with *heading*."""
    if road_piece is RoadPieceType.INTERSECTION:
        return "+"
    if road_piece is RoadPieceType.CORNER:
        if ascending:
            return "/" if heading.is_horizontal else "\\"
        return "\\" if heading.is_horizontal else "/"
    return "-" if heading.is_horizontal else "|"


class DeadReckoningMapper:
    """Infer an ordered list of grid pieces from discovery events.

    Implements the track-mapping listener interface
    (:meth:`on_track_piece_discovered`, :meth:`on_location_update`), so it
    can be attached to a :class:`~pyoverdrive.tracking.coordinator.MappingCoordinator`.
    Not thread-safe: feed it one serialized event stream.
    """

    def __init__(self) -> None:
        self._state = MapperState.IDLE
        self._callback: TrackMappingCallback | None = None
        self._pieces: list[TrackPiece] = []
        self._position: VehiclePosition | None = None
        self._ascending = True
        self._last_road_piece: RoadPieceType | None = None
        self._last_location = -1

    @property
    def state(self) -> MapperState:
        return self._state

    @property
    def is_gathering(self) -> bool:
        return self._state is MapperState.GATHERING

    @property
    def is_complete(self) -> bool:
        return self._state is MapperState.COMPLETED

    @property
    def position(self) -> VehiclePosition | None:
        return self._position

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, callback: TrackMappingCallback | None = None) -> None:
        """Clear all state and begin gathering."""
        self._clear()
        self._callback = callback
        self._state = MapperState.GATHERING
        _logger.info("Track mapping started")

    def stop(self) -> None:
        """Stop gathering; discovered pieces are kept."""
        if self._state is MapperState.GATHERING:
            self._state = MapperState.IDLE
            _logger.info("Track mapping stopped with %d pieces", len(self._pieces))

    def reset(self) -> None:
        self._clear()
        self._callback = None
        self._state = MapperState.IDLE

    def _clear(self) -> None:
        self._pieces = []
        self._position = None
        self._ascending = True
        self._last_road_piece = None
        self._last_location = -1

    # ------------------------------------------------------------------
    # Track-mapping listener
    # ------------------------------------------------------------------

    def on_location_update(self, location_id: int, ascending: bool) -> None:
        self._ascending = ascending

    def on_track_piece_discovered(self, location_id: int, road_piece_id: int, road_piece: RoadPieceType) -> None:
        if self._state is not MapperState.GATHERING:
            return

        if not self._is_new_piece(location_id, road_piece):
            self._extend_current(location_id)
            return

        _logger.debug(
            "New piece location=%s type=%s ascending=%s",
            location_id,
            road_piece,
            self._ascending,
        )

        if self._position is None:
            self._add_first(location_id, road_piece_id, road_piece)
            return

        current = self._position
        heading = current.heading
        if road_piece is RoadPieceType.CORNER:
            heading = heading.turn_left() if self._ascending else heading.turn_right()
        x, y = current.step()
        moved = VehiclePosition(x, y, heading)

        first = self._pieces[0]
        if (x, y) == first.coordinate and len(self._pieces) >= MIN_LOOP_PIECES:
            self._position = moved
            self._state = MapperState.COMPLETED
            _logger.info("Track loop closed with %d pieces", len(self._pieces))
            self._notify_complete()
            return

        if any(piece.coordinate == (x, y) for piece in self._pieces):
            # Revisit of a known cell: follow it without recording a piece.
            _logger.debug("Revisit of (%d,%d), no piece recorded", x, y)
            self._position = moved
            return

        piece = TrackPiece(
            x=x,
            y=y,
            road_piece=road_piece,
            enter_heading=current.heading,
            exit_heading=heading,
            road_piece_id=road_piece_id,
            start_location=location_id,
            end_location=location_id,
            glyph=glyph_for(road_piece, current.heading, self._ascending),
        )
        self._pieces.append(piece)
        self._position = moved
        self._notify_added(piece)

    def _add_first(self, location_id: int, road_piece_id: int, road_piece: RoadPieceType) -> None:
        heading = Heading.EAST
        glyph = glyph_for(road_piece, heading, False)
        if road_piece is RoadPieceType.CORNER:
            heading = Heading.NORTH if self._ascending else Heading.SOUTH
            glyph = "/" if self._ascending else "\\"

        x, y = _ORIGIN
        self._position = VehiclePosition(x, y, heading)
        piece = TrackPiece(
            x=x,
            y=y,
            road_piece=road_piece,
            enter_heading=heading,
            exit_heading=heading,
            road_piece_id=road_piece_id,
            start_location=location_id,
            end_location=location_id,
            glyph=glyph,
        )
        self._pieces.append(piece)
        self._notify_added(piece)

    def _is_new_piece(self, location_id: int, road_piece: RoadPieceType) -> bool:
        last = self._last_road_piece
        last_location = self._last_location
        self._last_location = location_id

        if last is None:
            self._last_road_piece = road_piece
            return True

        # START and FINISH are two markers on the same straight.
        if last.is_start_or_finish and road_piece.is_start_or_finish and last is not road_piece:
            self._last_road_piece = road_piece
            return False

        if last.normalized() is not road_piece.normalized():
            self._last_road_piece = road_piece
            return True

        expected = last_location + 1 if self._ascending else last_location - 1
        if location_id == expected:
            return False

        self._last_road_piece = road_piece
        return True

    def _extend_current(self, location_id: int) -> None:
        if self._position is None:
            return
        coordinate = (self._position.x, self._position.y)
        for index, piece in enumerate(self._pieces):
            if piece.coordinate == coordinate:
                self._pieces[index] = piece.with_location(location_id)
                return

    def _notify_added(self, piece: TrackPiece) -> None:
        if self._callback is None:
            return
        try:
            self._callback.on_piece_added(piece)
        except Exception:
            _logger.warning("Mapping callback failed in on_piece_added", exc_info=True)

    def _notify_complete(self) -> None:
        if self._callback is None:
            return
        try:
            self._callback.on_track_complete(self.snapshot())
        except Exception:
            _logger.warning("Mapping callback failed in on_track_complete", exc_info=True)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def snapshot(self) -> tuple[TrackPiece, ...]:
        """Discovered pieces in discovery order."""
        return tuple(self._pieces)

    def get_pieces(self) -> tuple[TrackPiece, ...]:
        return self.snapshot()

    def ascii_art(self) -> str:
        """Render the pieces on a text grid, highest ``y`` on top."""
        if not self._pieces:
            return "No track data"

        min_x = min(piece.x for piece in self._pieces)
        min_y = min(piece.y for piece in self._pieces)
        shifted = [piece.shift(-min_x, -min_y) for piece in self._pieces]
        max_x = max(piece.x for piece in shifted)
        max_y = max(piece.y for piece in shifted)

        grid = [[" "] * (max_x + 1) for _ in range(max_y + 1)]
        for piece in shifted:
            grid[piece.y][piece.x] = piece.glyph

        return "".join("".join(grid[y]) + "\n" for y in range(max_y, -1, -1))

    def report(self) -> str:
        rule = "=" * 80
        lines = [
            rule,
            "TRACK MAPPER REPORT",
            rule,
            f"State: {self._state}",
            f"Total pieces: {len(self._pieces)}",
            "",
            "Piece list:",
        ]
        lines.extend(f"#{index:03d}: {piece}" for index, piece in enumerate(self._pieces))
        lines.extend(["", "ASCII Art Track:", "-" * 80, self.ascii_art(), rule])
        return "\n".join(lines)
