"""Graph-based track topology analysis."""

from pyoverdrive.topology.analyzer import LocationRecord, TrackTopologyAnalyzer
from pyoverdrive.topology.graph import TopologyNode, TopologyType, TrackTopology

__all__ = [
    "LocationRecord",
    "TopologyNode",
    "TopologyType",
    "TrackTopology",
    "TrackTopologyAnalyzer",
]
