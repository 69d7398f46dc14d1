from __future__ import annotations

from pyoverdrive.models.road_piece import RoadPieceType
from pyoverdrive.topology import TopologyType, TrackTopology, TrackTopologyAnalyzer

S = RoadPieceType.STRAIGHT
C = RoadPieceType.CORNER


def _discover(analyzer: TrackTopologyAnalyzer, nodes: dict[int, RoadPieceType]) -> None:
    for location, piece in nodes.items():
        analyzer.on_track_piece_discovered(location, piece.ids[0], piece)


def _visit(analyzer: TrackTopologyAnalyzer, locations: list[int], *, ascending: bool = True) -> None:
    for location in locations:
        analyzer.on_location_update(location, ascending)


def _drive_laps(analyzer: TrackTopologyAnalyzer, lap: list[tuple[int, RoadPieceType]], laps: int) -> None:
    """Feed events in the order a mapping coordinator emits them."""
    for _ in range(laps):
        for location, piece in lap:
            analyzer.on_location_update(location, True)
            analyzer.on_track_piece_discovered(location, piece.ids[0], piece)
    first_location = lap[0][0]
    analyzer.on_location_update(first_location, True)


_OVAL_LAP = [(1, S), (2, S), (3, C), (4, S), (5, S), (6, C)]


class TestClassification:
    def test_empty_is_unknown(self) -> None:
        assert TrackTopologyAnalyzer().get_topology().type is TopologyType.UNKNOWN

    def test_oval(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _drive_laps(analyzer, _OVAL_LAP, laps=2)

        topology = analyzer.get_topology()

        assert topology.type is TopologyType.OVAL
        assert topology.track_length == 6
        assert topology.has_complete_cycle() is True
        assert topology.road_piece_statistics() == {S: 4, C: 2}

    def test_simple_loop(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _drive_laps(analyzer, [(1, C), (2, C), (3, C), (4, C)], laps=2)
        assert analyzer.get_topology().type is TopologyType.SIMPLE_LOOP

    def test_intersection_is_branching(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _drive_laps(analyzer, [(1, S), (2, RoadPieceType.INTERSECTION), (3, C), (4, C)], laps=2)
        assert analyzer.get_topology().type is TopologyType.BRANCHING

    def test_shared_successor_is_complex(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S, 2: S, 3: C, 4: C})
        _visit(analyzer, [1, 2, 3, 1, 4, 2])

        topology = analyzer.get_topology()

        assert topology.type is TopologyType.COMPLEX
        assert topology.nodes[1].next_locations == (2,)
        assert set(topology.nodes[2].prev_locations) == {1, 4}

    def test_open_path_is_unknown(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S, 2: S, 3: C})
        _visit(analyzer, [1, 2, 3])
        assert analyzer.get_topology().type is TopologyType.UNKNOWN

    def test_repeated_classification_is_stable(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _drive_laps(analyzer, _OVAL_LAP, laps=3)
        assert analyzer.get_topology().type is TopologyType.OVAL
        assert analyzer.get_topology().type is TopologyType.OVAL


class TestGraphBuilding:
    def test_descending_updates_point_edges_backwards(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S, 2: S, 3: S})
        _visit(analyzer, [3, 2, 1], ascending=False)

        nodes = analyzer.get_topology().nodes
        assert nodes[1].next_locations == (2,)
        assert nodes[2].next_locations == (3,)

    def test_edges_to_undiscovered_locations_are_ignored(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S})
        _visit(analyzer, [1, 2, 1])
        assert analyzer.get_topology().nodes[1].next_locations == ()

    def test_repeated_location_adds_no_edge(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S})
        _visit(analyzer, [1, 1, 1])
        assert analyzer.get_topology().nodes[1].next_locations == ()
        assert len(analyzer.get_history()) == 3

    def test_bidirectional_pair_keeps_more_frequent_direction(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S, 2: S})
        _visit(analyzer, [1, 2, 1, 2])

        nodes = analyzer.get_topology().nodes
        assert nodes[1].next_locations == (2,)
        assert nodes[2].next_locations == ()
        assert nodes[1].prev_locations == ()

    def test_bidirectional_tie_keeps_first_node_direction(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S, 2: S})
        _visit(analyzer, [1, 2, 1])

        nodes = analyzer.get_topology().nodes
        assert nodes[1].next_locations == (2,)
        assert nodes[2].next_locations == ()

    def test_branch_keeps_most_travelled_successor(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _discover(analyzer, {1: S, 2: S, 3: S})
        _visit(analyzer, [1, 3, 1, 2, 1, 2, 1, 2])

        nodes = analyzer.get_topology().nodes
        assert nodes[1].next_locations == (2,)
        assert 1 not in nodes[3].prev_locations


class TestHistoryAndReports:
    def test_history_is_a_copy(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _visit(analyzer, [4, 5])
        history = analyzer.get_history()
        _visit(analyzer, [6])

        assert isinstance(history, tuple)
        assert [record.location_id for record in history] == [4, 5]
        assert str(history[0]) == "[4, ↑]"

    def test_track_sequence(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        assert analyzer.track_sequence() == "No data"

        _drive_laps(analyzer, _OVAL_LAP, laps=2)
        assert analyzer.track_sequence() == "STRAIGHT -> STRAIGHT -> CORNER -> STRAIGHT -> STRAIGHT -> CORNER"

    def test_reports(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _drive_laps(analyzer, _OVAL_LAP, laps=2)
        topology = analyzer.get_topology()

        description = topology.description()
        assert "Type: OVAL" in description
        assert "Has Complete Cycle: True" in description
        assert "--- Track Sequence ---" in analyzer.report()

    def test_reset(self) -> None:
        analyzer = TrackTopologyAnalyzer()
        _drive_laps(analyzer, _OVAL_LAP, laps=2)
        analyzer.reset()

        assert analyzer.get_history() == ()
        topology = analyzer.get_topology()
        assert topology.track_length == 0
        assert topology.type is TopologyType.UNKNOWN


def test_topology_add_connection_requires_both_nodes() -> None:
    topology = TrackTopology()
    topology.add_node(1, S)
    assert topology.add_connection(1, 2) is False
    topology.add_node(2, C)
    topology.add_node(2, S)
    assert topology.add_connection(1, 2) is True
    assert topology.nodes[2].road_piece is C
