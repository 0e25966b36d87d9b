"""Pydantic model for relay events delivered to the presentation layer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from tvhome.core.models.state import RelayTopic


class Event(BaseModel):
    """Structured notification forwarded by :class:`~tvhome.core.event_relay.EventRelay`."""

    topic: RelayTopic
    action: str = Field(description="Topic-specific action, e.g. 'added' or 'state-changed'")
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
