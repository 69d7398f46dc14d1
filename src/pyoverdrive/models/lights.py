"""Typed light pattern configuration."""

from __future__ import annotations

from pydantic import Field, field_validator

from pyoverdrive._constants import MAX_LIGHT_INTENSITY, LightChannel, LightEffect, cycles_per_min_to_10s
from pyoverdrive.models._base import OverdriveBaseModel


class LightConfig(OverdriveBaseModel):
    """One channel of a ``LIGHTS_PATTERN`` command.

    Parameters
    ----------
    channel : LightChannel
        RGB or lamp channel to drive.
    effect : LightEffect
        Steady, fade, throb, flash or random.
    start : int
        Start intensity (0-14).
    end : int
        End intensity (0-14).
    cycles_per_min : int
        Animation rate; encoded on the wire as cycles per 10 seconds.
    """

    channel: LightChannel
    effect: LightEffect = LightEffect.STEADY
    start: int = Field(default=0, ge=0, le=MAX_LIGHT_INTENSITY)
    end: int = Field(default=MAX_LIGHT_INTENSITY, ge=0, le=MAX_LIGHT_INTENSITY)
    cycles_per_min: int = Field(default=0, ge=0)

    @field_validator("channel", "effect", mode="before")
    @classmethod
    def _coerce_int(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value

    def to_bytes(self) -> bytes:
        """Five-byte wire encoding: channel, effect, start, end, cycles/10s."""
        return bytes(
            (
                int(self.channel),
                int(self.effect),
                self.start,
                self.end,
                cycles_per_min_to_10s(self.cycles_per_min),
            )
        )
