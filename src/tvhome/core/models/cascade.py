"""Cascade records: strategies, attempts, outcomes and capability profiles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from tvhome.core.models.state import VendorKind


@dataclass(frozen=True)
class Strategy:
    """One independently-failable attempt within a cascade.

    ``run`` signals failure by raising; returning normally is success.
    ``name`` is only used for diagnostics.
    """

    name: str
    run: Callable[[], None]


class AttemptRecord(BaseModel):
    """Result of running a single strategy."""

    model_config = ConfigDict(frozen=True)

    strategy_name: str
    ok: bool
    error_message: str | None = None


class CascadeOutcome(BaseModel):
    """Aggregate result of one cascade invocation."""

    model_config = ConfigDict(frozen=True)

    attempts: tuple[AttemptRecord, ...] = Field(default_factory=tuple)
    succeeded: bool = False

    @property
    def winning_strategy(self) -> str | None:
        """Name of the first strategy that completed without error."""
        for attempt in self.attempts:
            if attempt.ok:
                return attempt.strategy_name
        return None

    @property
    def failures(self) -> list[AttemptRecord]:
        return [a for a in self.attempts if not a.ok]


class CapabilityProfile(BaseModel):
    """Which vendor-specific control surfaces exist on the device."""

    model_config = ConfigDict(frozen=True)

    vendor_kind: VendorKind = VendorKind.GENERIC
    matched_identifier: str | None = Field(
        default=None, description="Identifier whose presence decided the vendor"
    )

    @property
    def is_generic(self) -> bool:
        return self.vendor_kind is VendorKind.GENERIC
