"""Render :class:`~tvhome.core.intents.Intent` records as ``am`` commands."""

from __future__ import annotations

import shlex

from tvhome.core.intents import Intent


def intent_args(intent: Intent) -> list[str]:
    """Return the ``am`` argument list describing *intent*."""
    args: list[str] = []
    if intent.action:
        args += ["-a", intent.action]
    if intent.data:
        args += ["-d", intent.data]
    if intent.mime_type:
        args += ["-t", intent.mime_type]
    for category in intent.categories:
        args += ["-c", category]
    if intent.component:
        args += ["-n", intent.component.flatten()]
    if intent.flags:
        args += ["-f", str(intent.flag_mask())]
    for key, value in intent.extras.items():
        # bool first: it is a subclass of int.
        if isinstance(value, bool):
            args += ["--ez", key, "true" if value else "false"]
        elif isinstance(value, int):
            args += ["--ei", key, str(value)]
        elif isinstance(value, float):
            args += ["--ef", key, repr(value)]
        else:
            args += ["--es", key, str(value)]
    return args


def start_command(intent: Intent) -> str:
    return shlex.join(["am", "start", *intent_args(intent)])


def broadcast_command(intent: Intent) -> str:
    return shlex.join(["am", "broadcast", *intent_args(intent)])
