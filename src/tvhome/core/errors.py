"""Exception taxonomy.

Strategy-level errors are recorded inside a
:class:`~tvhome.core.models.cascade.CascadeOutcome`; none of these cross
the :class:`~tvhome.core.device_controller.DeviceController` boundary.
"""

from __future__ import annotations


class TvHomeError(Exception):
    """Base class for all tvhome errors."""


class NotFoundError(TvHomeError):
    """A file, input or package does not exist."""


class SuspendedError(TvHomeError):
    """The operation needs user action (e.g. a consent screen) before a retry."""


class PlatformCallError(TvHomeError):
    """A platform call failed: non-zero exit, error output or timeout."""


class UnsupportedCapability(PlatformCallError):
    """The vendor surface is not reachable on this device or backend."""


class MissingPermissionError(PlatformCallError):
    """The app manifest does not declare a permission the call needs."""

    def __init__(self, permission: str) -> None:
        super().__init__(f"manifest is missing {permission}")
        self.permission = permission


class StrategyFailed(TvHomeError):
    """One cascade attempt raised."""

    def __init__(self, strategy_name: str, cause: BaseException) -> None:
        super().__init__(f"{strategy_name}: {describe_error(cause)}")
        self.strategy_name = strategy_name
        self.cause = cause


class CascadeExhausted(TvHomeError):
    """No strategy of a first-success cascade succeeded."""

    def __init__(self, cascade: str, attempts: int) -> None:
        super().__init__(f"{cascade}: all {attempts} strategies failed")
        self.cascade = cascade
        self.attempts = attempts


def describe_error(err: BaseException, max_len: int = 200) -> str:
    """Return a one-line summary of *err* for attempt records and logs."""
    text = str(err).strip().splitlines()
    message = text[0] if text else ""
    summary = f"{type(err).__name__}: {message}" if message else type(err).__name__
    return summary[:max_len]
