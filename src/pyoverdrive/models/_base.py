"""Base model and enum for pyoverdrive data types.

Every model inherits from :class:`OverdriveBaseModel` which makes
instances immutable and rejects unexpected fields, so a notification or
track piece can be shared between listeners without defensive copies.

Wire-level enums that must never fail on an unexpected byte inherit from
:class:`OverdriveEnum`, which resolves unmapped values to ``UNKNOWN``.
"""

from __future__ import annotations

import enum
import time

from pydantic import BaseModel, ConfigDict


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class OverdriveEnum(enum.IntEnum):
    """Base for wire enums.

    Every subclass **must** define an ``UNKNOWN`` member.
    Values the vehicle sends that have no mapped member automatically
    resolve to ``UNKNOWN`` instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> OverdriveEnum:
        # pylint: disable=no-member
        if hasattr(cls, "UNKNOWN"):
            unknown: OverdriveEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class OverdriveBaseModel(BaseModel):
    """Frozen pydantic base for all pyoverdrive models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )
