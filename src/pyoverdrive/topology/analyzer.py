"""Infer the track's shape from the raw location stream.

The analyzer records every location update, links consecutive location
ids into a directed graph and, on request, prunes the graph by edge
frequency before classifying it.  Pruning only removes edges, so calling
:meth:`TrackTopologyAnalyzer.get_topology` repeatedly is stable.
"""

from __future__ import annotations

import logging
from collections import Counter

from pydantic import Field

from pyoverdrive.models._base import OverdriveBaseModel, now_ms
from pyoverdrive.models.road_piece import RoadPieceType
from pyoverdrive.topology.graph import TopologyType, TrackTopology

_logger = logging.getLogger(__name__)

OVAL_MIN_CORNERS = 2
OVAL_MAX_CORNERS = 4

_REPORT_HISTORY = 20


class LocationRecord(OverdriveBaseModel):
    location_id: int
    ascending: bool
    timestamp: int = Field(default_factory=now_ms)

    def __str__(self) -> str:
        return f"[{self.location_id}, {'↑' if self.ascending else '↓'}]"


class TrackTopologyAnalyzer:
    """Track-mapping listener that builds and classifies a location graph."""

    def __init__(self) -> None:
        self._topology = TrackTopology()
        self._history: list[LocationRecord] = []
        self._previous_location: int | None = None

    # ------------------------------------------------------------------
    # Track-mapping listener
    # ------------------------------------------------------------------

    def on_track_piece_discovered(self, location_id: int, road_piece_id: int, road_piece: RoadPieceType) -> None:
        _logger.debug("Discovered location=%s type=%s", location_id, road_piece)
        self._topology.add_node(location_id, road_piece)

    def on_location_update(self, location_id: int, ascending: bool) -> None:
        self._history.append(LocationRecord(location_id=location_id, ascending=ascending))

        previous = self._previous_location
        if previous is not None and previous != location_id:
            if ascending:
                self._topology.add_connection(previous, location_id)
            else:
                self._topology.add_connection(location_id, previous)
            _logger.debug("Connection %s -> %s ascending=%s", previous, location_id, ascending)

        self._previous_location = location_id

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def get_history(self) -> tuple[LocationRecord, ...]:
        return tuple(self._history)

    def get_topology(self) -> TrackTopology:
        """Prune noisy edges, classify, and return the topology."""
        self._cleanup()
        self._topology.type = self._classify()
        return self._topology

    def reset(self) -> None:
        self._topology.clear()
        self._history.clear()
        self._previous_location = None
        _logger.info("Topology analyzer reset")

    def track_sequence(self) -> str:
        """Piece types in order of first sighting, e.g. ``"START -> CORNER"``."""
        if not self._history:
            return "No data"
        seen: set[int] = set()
        names: list[str] = []
        for record in self._history:
            if record.location_id in seen:
                continue
            node = self._topology.node(record.location_id)
            if node is None:
                continue
            seen.add(record.location_id)
            names.append(str(node.road_piece))
        return " -> ".join(names)

    def report(self) -> str:
        lines = [
            self._topology.description(),
            "--- Track Sequence ---",
            self.track_sequence(),
            "",
            f"--- Location History (last {_REPORT_HISTORY}) ---",
        ]
        lines.extend(f"  {record}" for record in self._history[-_REPORT_HISTORY:])
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _edge_frequency(self) -> Counter[tuple[int, int]]:
        frequency: Counter[tuple[int, int]] = Counter()
        previous: int | None = None
        for record in self._history:
            if previous is not None and previous != record.location_id:
                frequency[(previous, record.location_id)] += 1
            previous = record.location_id
        return frequency

    def _cleanup(self) -> None:
        frequency = self._edge_frequency()
        topology = self._topology
        nodes = list(topology.nodes.values())

        # Keep only the most travelled successor of each branching node.
        for node in nodes:
            successors = node.next_locations
            if len(successors) <= 1:
                continue
            best: int | None = None
            best_frequency = 0
            for next_id in successors:
                count = frequency[(node.location_id, next_id)]
                if count > best_frequency:
                    best, best_frequency = next_id, count
            for next_id in successors:
                if next_id != best:
                    topology.remove_connection(node.location_id, next_id)
                    _logger.info("Removed noisy connection %s -> %s", node.location_id, next_id)

        # Collapse A <-> B to the more travelled direction.
        for node in nodes:
            for next_id in node.next_locations:
                other = topology.node(next_id)
                if other is None or node.location_id not in other.next_locations:
                    continue
                forward = frequency[(node.location_id, next_id)]
                backward = frequency[(next_id, node.location_id)]
                _logger.info(
                    "Bidirectional connection %s <-> %s (freq %d vs %d)",
                    node.location_id,
                    next_id,
                    forward,
                    backward,
                )
                if forward < backward:
                    topology.remove_connection(node.location_id, next_id)
                else:
                    topology.remove_connection(next_id, node.location_id)

    def _classify(self) -> TopologyType:
        topology = self._topology
        nodes = list(topology.nodes.values())
        if not nodes:
            return TopologyType.UNKNOWN

        if any(node.road_piece is RoadPieceType.INTERSECTION for node in nodes):
            return TopologyType.BRANCHING

        max_out = max(len(node.next_locations) for node in nodes)
        max_in = max(len(node.prev_locations) for node in nodes)
        if max_out > 1 or max_in > 1:
            return TopologyType.COMPLEX

        if not topology.has_complete_cycle():
            return TopologyType.UNKNOWN

        if topology.has_bidirectional_pair():
            return TopologyType.BIDIRECTIONAL_LOOP
        if any(len(node.next_locations) == 2 and len(node.prev_locations) == 2 for node in nodes):
            return TopologyType.FIGURE_EIGHT

        stats = topology.road_piece_statistics()
        corners = stats.get(RoadPieceType.CORNER, 0)
        straights = stats.get(RoadPieceType.STRAIGHT, 0)
        if OVAL_MIN_CORNERS <= corners <= OVAL_MAX_CORNERS and straights > corners:
            _logger.debug("Oval pattern: %d corners, %d straights", corners, straights)
            return TopologyType.OVAL
        return TopologyType.SIMPLE_LOOP
