"""Dead-reckoning track mapping and spatial lookup."""

from pyoverdrive.tracking.coordinator import MappingCoordinator
from pyoverdrive.tracking.lookup import MapBounds, SpatialLookupIndex, TrackMapData
from pyoverdrive.tracking.mapper import DeadReckoningMapper, MapperState, TrackMappingCallback

__all__ = [
    "DeadReckoningMapper",
    "MapBounds",
    "MapperState",
    "MappingCoordinator",
    "SpatialLookupIndex",
    "TrackMapData",
    "TrackMappingCallback",
]
