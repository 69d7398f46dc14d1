from __future__ import annotations

import pydantic
import pytest

from pyoverdrive._constants import LightChannel, LightEffect, cycles_per_min_to_10s
from pyoverdrive.exceptions import UnknownRoadPieceError
from pyoverdrive.models import (
    BatteryLevel,
    ChargerInfo,
    Heading,
    IntersectionCode,
    LightConfig,
    Notification,
    NotificationKind,
    RoadPieceType,
    TrackPiece,
    VersionResponse,
    alternate_start_finish_id,
)


class TestRoadPieceType:
    @pytest.mark.parametrize(
        ("road_piece_id", "expected"),
        [
            (33, RoadPieceType.START),
            (34, RoadPieceType.FINISH),
            (36, RoadPieceType.STRAIGHT),
            (51, RoadPieceType.STRAIGHT),
            (17, RoadPieceType.CORNER),
            (27, RoadPieceType.CORNER),
            (10, RoadPieceType.INTERSECTION),
        ],
    )
    def test_from_id(self, road_piece_id: int, expected: RoadPieceType) -> None:
        assert RoadPieceType.from_id(road_piece_id) is expected

    def test_unknown_id(self) -> None:
        with pytest.raises(UnknownRoadPieceError) as excinfo:
            RoadPieceType.from_id(99)
        assert excinfo.value.road_piece_id == 99
        assert isinstance(excinfo.value, ValueError)

    def test_ids(self) -> None:
        assert RoadPieceType.STRAIGHT.ids == (36, 39, 40, 48, 51)
        assert RoadPieceType.START.ids == (33,)

    def test_normalized(self) -> None:
        assert RoadPieceType.START.normalized() is RoadPieceType.STRAIGHT
        assert RoadPieceType.FINISH.normalized() is RoadPieceType.STRAIGHT
        assert RoadPieceType.CORNER.normalized() is RoadPieceType.CORNER

    def test_alternate_start_finish(self) -> None:
        assert alternate_start_finish_id(33) == 34
        assert alternate_start_finish_id(34) == 33
        assert alternate_start_finish_id(36) == 36


def test_heading_turns() -> None:
    assert Heading.EAST.turn_left() is Heading.NORTH
    assert Heading.EAST.turn_right() is Heading.SOUTH
    assert Heading.NORTH.turn_right() is Heading.EAST
    assert Heading.WEST.delta == (-1, 0)


def test_unknown_wire_enum_value() -> None:
    assert IntersectionCode(42) is IntersectionCode.UNKNOWN


def test_track_piece_with_location() -> None:
    piece = TrackPiece(x=0, y=0, road_piece=RoadPieceType.STRAIGHT, enter_heading="EAST", exit_heading=0)
    assert piece.enter_heading is Heading.EAST
    assert not piece.has_location_range

    ranged = piece.with_location(4).with_location(6)

    assert (ranged.start_location, ranged.end_location) == (4, 6)
    assert piece.start_location == -1


def test_models_are_frozen() -> None:
    piece = TrackPiece(x=0, y=0, road_piece=RoadPieceType.STRAIGHT, enter_heading=0, exit_heading=0)
    with pytest.raises(pydantic.ValidationError):
        piece.x = 3  # type: ignore[misc]


class TestLightConfig:
    def test_to_bytes(self) -> None:
        config = LightConfig(channel=LightChannel.GREEN, effect=LightEffect.THROB, start=2, end=12, cycles_per_min=120)
        assert config.to_bytes() == bytes([3, 2, 2, 12, 20])

    def test_intensity_bounds(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            LightConfig(channel=LightChannel.RED, end=15)

    def test_string_channel(self) -> None:
        assert LightConfig(channel="2").channel is LightChannel.BLUE


@pytest.mark.parametrize(("per_min", "per_10s"), [(0, 0), (60, 10), (59, 9), (10_000, 255)])
def test_cycles_conversion(per_min: int, per_10s: int) -> None:
    assert cycles_per_min_to_10s(per_min) == per_10s


def test_notification_union_discriminates() -> None:
    adapter = pydantic.TypeAdapter(Notification)

    charger = adapter.validate_python(
        {"kind": NotificationKind.CHARGER_INFO, "on_charger": True, "battery_low": False, "battery_full": False, "charging": True}
    )
    battery = adapter.validate_python({"kind": NotificationKind.BATTERY, "level": 3900})

    assert isinstance(charger, ChargerInfo)
    assert isinstance(battery, BatteryLevel)
    assert battery.level == 3900


def test_version_string() -> None:
    assert VersionResponse(version=0x266E).version_string == "38.110"
