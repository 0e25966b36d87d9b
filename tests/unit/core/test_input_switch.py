"""Tests for HDMI port resolution and the input-switch cascade."""

from __future__ import annotations

import pytest

from tvhome.core import intents
from tvhome.core.capability_probe import CapabilityProbe
from tvhome.core.input_switch import InputSwitchCascade, resolve_port, source_code_for
from tvhome.core.models.config import VendorConfig
from tvhome.core.models.device import DisplayInput
from tvhome.core.models.state import InputKind
from tvhome.platform.mock.mock_factory import MockPlatformFactory

TV_CENTER = "com.mediatek.wwtv.tvcenter/com.mediatek.wwtv.tvcenter.nav.TurnkeyUiMainActivity"


def _cascade(factory: MockPlatformFactory, sleeps: list[float] | None = None) -> InputSwitchCascade:
    config = VendorConfig()
    return InputSwitchCascade(
        factory.activity,
        factory.vendor,
        CapabilityProbe(factory.vendor, config),
        config,
        sleep=(sleeps.append if sleeps is not None else lambda _: None),
    )


class TestResolvePort:
    @pytest.mark.parametrize(
        ("name", "input_id", "port"),
        [
            ("HDMI 2", "x/HW5", 2),
            ("HDMI3 (ARC)", "x", 3),
            ("Game console", "com.example/.Hdmi/4", 4),
            ("Game console", "com.example/.Hdmi/15", 15),
            ("Game console", "com.example/.Hdmi/HW4", 1),
            ("Game console", "com.example/.Hdmi/HW5", 1),
            ("Game console", "com.example/.Hdmi/7/HW5", 1),
            ("Blu-ray", "no-number-here", 1),
            ("", "", 1),
        ],
    )
    def test_resolution_order(self, name: str, input_id: str, port: int) -> None:
        assert resolve_port(name, input_id) == port

    def test_first_digit_in_range_wins(self) -> None:
        # '0', '5'..'9' are skipped; the first 1-4 digit decides.
        assert resolve_port("Input 7 / 3", "HW1") == 3


class TestSourceCode:
    def test_default_table_swaps_ports_2_and_3(self) -> None:
        table = VendorConfig().source_codes
        assert [source_code_for(p, table) for p in (1, 2, 3, 4)] == [23, 25, 24, 26]

    def test_unknown_port_uses_port_1_code(self) -> None:
        assert source_code_for(15, VendorConfig().source_codes) == 23


class TestGenericDevice:
    def test_standard_passthrough_wins(self, factory: MockPlatformFactory, hdmi2: DisplayInput) -> None:
        cascade = _cascade(factory)
        assert cascade.switch_to(hdmi2) is True

        intent = factory.activity.started[0]
        assert intent.action == intents.ACTION_VIEW
        assert intent.data == intents.PASSTHROUGH_URI_PREFIX + hdmi2.id
        assert intent.component is None
        assert intent.extras == {}
        assert intents.FLAG_ACTIVITY_NEW_TASK in intent.flags
        assert cascade.last_outcome.winning_strategy == "standard-passthrough"
        assert factory.vendor.input_source_calls == []


class TestVendorDevice:
    def test_standard_intent_targets_vendor_component(
        self, mediatek_factory: MockPlatformFactory, hdmi2: DisplayInput
    ) -> None:
        assert _cascade(mediatek_factory).switch_to(hdmi2) is True
        intent = mediatek_factory.activity.started[0]
        assert intent.component.flatten() == TV_CENTER
        assert intent.extras == {
            "from_launcher": True,
            "source_flag": 4,
            "source_input_id": 2,
            "mtk_input_source": 25,
        }

    def test_hardware_port_id_uses_port_one(self, mediatek_factory: MockPlatformFactory) -> None:
        console = DisplayInput(
            id="com.mediatek.tvinput/.hdmi.HDMIInputService/HW5",
            display_name="Game console",
            kind=InputKind.HDMI,
        )
        assert _cascade(mediatek_factory).switch_to(console) is True
        extras = mediatek_factory.activity.started[0].extras
        assert extras["source_input_id"] == 1
        assert extras["mtk_input_source"] == 23

    def test_falls_back_to_config_service(
        self, mediatek_factory: MockPlatformFactory, hdmi2: DisplayInput
    ) -> None:
        mediatek_factory.activity.rejected_components.add(TV_CENTER)
        cascade = _cascade(mediatek_factory)

        assert cascade.switch_to(hdmi2) is True
        assert mediatek_factory.vendor.input_source_calls == [25]
        assert cascade.last_outcome.winning_strategy == "vendor-config-service"
        # Third strategy never ran.
        assert mediatek_factory.activity.broadcasts == []

    def test_falls_back_to_broadcast_then_activity(
        self, mediatek_factory: MockPlatformFactory
    ) -> None:
        mediatek_factory.activity.fail.add("start_activity")
        mediatek_factory.vendor.fail.add("set_input_source")
        sleeps: list[float] = []
        cascade = _cascade(mediatek_factory, sleeps)
        hdmi3 = DisplayInput(id="x/HW7", display_name="HDMI 3", kind=InputKind.HDMI)

        assert cascade.switch_to(hdmi3) is False
        # Broadcast went out before the activity launch failed.
        broadcast = mediatek_factory.activity.broadcasts[0]
        assert broadcast.action == "tv.mediatek.intent.action.TV_INPUT"
        assert broadcast.extras["mtk_input_source"] == 24
        assert sleeps == [0.3]
        assert [a.strategy_name for a in cascade.last_outcome.attempts] == [
            "standard-passthrough",
            "vendor-config-service",
            "vendor-activity",
        ]

    def test_third_strategy_can_win(self, mediatek_factory: MockPlatformFactory, hdmi2: DisplayInput) -> None:
        cascade = _cascade(mediatek_factory)
        strategies = cascade.build_strategies(
            hdmi2, CapabilityProbe(mediatek_factory.vendor, VendorConfig()).detect_vendor()
        )
        strategies[2].run()
        started = mediatek_factory.activity.started[-1]
        assert started.component.flatten() == TV_CENTER
        assert started.action is None


class TestProbeIsConsultedEachTime:
    def test_vendor_appearing_later_is_noticed(self, factory: MockPlatformFactory, hdmi2: DisplayInput) -> None:
        cascade = _cascade(factory)
        cascade.switch_to(hdmi2)
        factory.vendor.components.add("com.mediatek.wwtv.tvcenter")
        cascade.switch_to(hdmi2)
        assert factory.activity.started[0].component is None
        assert factory.activity.started[1].component is not None
