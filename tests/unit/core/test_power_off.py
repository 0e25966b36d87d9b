"""Tests for the run-all power-off cascade."""

from __future__ import annotations

from tvhome.core import intents
from tvhome.core.capability_probe import CapabilityProbe
from tvhome.core.models.config import VendorConfig
from tvhome.core.power_off import SHUTDOWN_REASON, PowerOffCascade
from tvhome.platform.mock.mock_factory import MockPlatformFactory


def _cascade(factory: MockPlatformFactory) -> PowerOffCascade:
    config = VendorConfig()
    return PowerOffCascade(
        factory.activity,
        factory.vendor,
        factory.power,
        factory.shell,
        CapabilityProbe(factory.vendor, config),
        config,
    )


class TestGenericDevice:
    def test_runs_standard_and_shell_routes_only(self, factory: MockPlatformFactory) -> None:
        cascade = _cascade(factory)
        assert cascade.power_off() is True

        names = [a.strategy_name for a in cascade.last_outcome.attempts]
        assert names[:2] == ["standard-shutdown-request", "power-service"]
        assert not any(n.startswith("vendor") for n in names)
        # Three shell commands, each plain and elevated.
        assert len(factory.shell.spawned) == 6
        assert ("reboot -p", True) in factory.shell.spawned

    def test_standard_request_intent(self, factory: MockPlatformFactory) -> None:
        _cascade(factory).power_off()
        intent = factory.activity.started[0]
        assert intent.action == intents.ACTION_REQUEST_SHUTDOWN
        assert intent.extras == {intents.EXTRA_KEY_CONFIRM: False}
        assert intents.FLAG_ACTIVITY_NEW_TASK in intent.flags
        assert factory.power.shutdowns == [(False, SHUTDOWN_REASON)]


class TestVendorDevice:
    def test_every_strategy_attempted_in_order(self, mediatek_factory: MockPlatformFactory) -> None:
        cascade = _cascade(mediatek_factory)
        cascade.power_off()
        names = [a.strategy_name for a in cascade.last_outcome.attempts]
        assert names[:7] == [
            "vendor-low-level-power",
            "vendor-power-state[0]",
            "vendor-power-state[1]",
            "vendor-power-state[2]",
            "vendor-broadcast[com.mediatek.wwtv.tvcenter.power]",
            "vendor-broadcast[android.intent.action.ACTION_SHUTDOWN]",
            "vendor-activity",
        ]
        assert mediatek_factory.vendor.power_state_calls == [0, 1, 2]
        assert mediatek_factory.vendor.low_level_power_offs == 1
        assert [b.extras for b in mediatek_factory.activity.broadcasts] == [
            {"powerState": "shutdown"},
            {"powerState": "shutdown"},
        ]

    def test_continues_after_success(self, mediatek_factory: MockPlatformFactory) -> None:
        cascade = _cascade(mediatek_factory)
        cascade.power_off()
        assert cascade.last_outcome.attempts[0].ok is True
        assert len(cascade.last_outcome.attempts) == 7 + 2 + 6

    def test_failures_do_not_stop_the_cascade(self, mediatek_factory: MockPlatformFactory) -> None:
        mediatek_factory.vendor.fail |= {"low_level_power_off", "set_power_state"}
        mediatek_factory.activity.fail.add("send_broadcast")
        cascade = _cascade(mediatek_factory)

        assert cascade.power_off() is True
        assert len(cascade.last_outcome.failures) == 6
        assert mediatek_factory.power.shutdowns


class TestAllFail:
    def test_returns_false(self, factory: MockPlatformFactory) -> None:
        factory.activity.fail.add("start_activity")
        factory.power.fail.add("shutdown")
        factory.shell.fail |= {"spawn", "spawn_elevated"}
        cascade = _cascade(factory)

        assert cascade.power_off() is False
        assert all(not a.ok for a in cascade.last_outcome.attempts)
        assert len(cascade.last_outcome.attempts) == 8
