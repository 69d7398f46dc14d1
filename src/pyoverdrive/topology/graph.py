"""Directed location graph and its shape classification."""

from __future__ import annotations

import enum

from pyoverdrive.models.road_piece import RoadPieceType


class TopologyType(enum.StrEnum):
    UNKNOWN = "UNKNOWN"
    SIMPLE_LOOP = "SIMPLE_LOOP"
    OVAL = "OVAL"
    """Two to four corners joined by longer straights."""
    BIDIRECTIONAL_LOOP = "BIDIRECTIONAL_LOOP"
    FIGURE_EIGHT = "FIGURE_EIGHT"
    BRANCHING = "BRANCHING"
    """Contains an intersection piece."""
    COMPLEX = "COMPLEX"


class TopologyNode:
    """One location id with its successor and predecessor ids.

    Neighbour ids keep insertion order so cleanup ties resolve the same way
    on every run.
    """

    __slots__ = ("location_id", "road_piece", "_next", "_prev")

    def __init__(self, location_id: int, road_piece: RoadPieceType) -> None:
        self.location_id = location_id
        self.road_piece = road_piece
        self._next: dict[int, None] = {}
        self._prev: dict[int, None] = {}

    @property
    def next_locations(self) -> tuple[int, ...]:
        return tuple(self._next)

    @property
    def prev_locations(self) -> tuple[int, ...]:
        return tuple(self._prev)

    def add_next(self, location_id: int) -> None:
        self._next[location_id] = None

    def add_prev(self, location_id: int) -> None:
        self._prev[location_id] = None

    def remove_next(self, location_id: int) -> None:
        self._next.pop(location_id, None)

    def remove_prev(self, location_id: int) -> None:
        self._prev.pop(location_id, None)

    def __repr__(self) -> str:
        return (
            f"Node[id={self.location_id}, type={self.road_piece}, "
            f"next={list(self._next)}, prev={list(self._prev)}]"
        )


class TrackTopology:
    """Location graph owned by one analysis session."""

    def __init__(self) -> None:
        self._nodes: dict[int, TopologyNode] = {}
        self.type = TopologyType.UNKNOWN

    @property
    def nodes(self) -> dict[int, TopologyNode]:
        """Nodes by location id, in discovery order (read-only copy)."""
        return dict(self._nodes)

    def node(self, location_id: int) -> TopologyNode | None:
        return self._nodes.get(location_id)

    @property
    def track_length(self) -> int:
        return len(self._nodes)

    def add_node(self, location_id: int, road_piece: RoadPieceType) -> None:
        if location_id not in self._nodes:
            self._nodes[location_id] = TopologyNode(location_id, road_piece)

    def add_connection(self, from_location: int, to_location: int) -> bool:
        """Add edge ``from -> to``.  Ignored unless both nodes exist."""
        source = self._nodes.get(from_location)
        target = self._nodes.get(to_location)
        if source is None or target is None:
            return False
        source.add_next(to_location)
        target.add_prev(from_location)
        return True

    def remove_connection(self, from_location: int, to_location: int) -> None:
        source = self._nodes.get(from_location)
        if source is not None:
            source.remove_next(to_location)
        target = self._nodes.get(to_location)
        if target is not None:
            target.remove_prev(from_location)

    def clear(self) -> None:
        self._nodes.clear()
        self.type = TopologyType.UNKNOWN

    def has_complete_cycle(self) -> bool:
        """True if any node can reach itself again."""
        return any(self._returns_to(start) for start in self._nodes)

    def _returns_to(self, start: int) -> bool:
        visited: set[int] = set()
        stack = list(self._nodes[start].next_locations)
        while stack:
            current = stack.pop()
            if current == start:
                return True
            if current in visited:
                continue
            visited.add(current)
            node = self._nodes.get(current)
            if node is not None:
                stack.extend(node.next_locations)
        return False

    def has_bidirectional_pair(self) -> bool:
        for node in self._nodes.values():
            for next_id in node.next_locations:
                other = self._nodes.get(next_id)
                if other is not None and node.location_id in other.next_locations:
                    return True
        return False

    def road_piece_statistics(self) -> dict[RoadPieceType, int]:
        counts: dict[RoadPieceType, int] = {}
        for node in self._nodes.values():
            counts[node.road_piece] = counts.get(node.road_piece, 0) + 1
        return {piece: counts[piece] for piece in RoadPieceType if piece in counts}

    def description(self) -> str:
        lines = [
            "=== Track Topology ===",
            f"Type: {self.type}",
            f"Total Segments: {self.track_length}",
            f"Has Complete Cycle: {self.has_complete_cycle()}",
            "",
            "--- Road Piece Statistics ---",
        ]
        lines.extend(f"  {piece}: {count}" for piece, count in self.road_piece_statistics().items())
        lines.extend(["", "--- Node Details ---"])
        lines.extend(f"  {node!r}" for node in self._nodes.values())
        return "\n".join(lines) + "\n"
