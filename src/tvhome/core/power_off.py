"""PowerOffCascade — power the device off by every known route.

The calling process cannot observe whether the TV actually went down, so
every strategy is attempted (``RUN_ALL``) and the result only means "at
least one platform call did not raise".  Repeating a shutdown request is
assumed to be harmless.
"""

from __future__ import annotations

import logging as _logging

from tvhome.core import intents
from tvhome.core.capability_probe import CapabilityProbe
from tvhome.core.cascade_executor import StrategyCascadeExecutor
from tvhome.core.interfaces.platform import (
    ActivityManagerInterface,
    PowerManagerInterface,
    ShellInterface,
    VendorServicesInterface,
)
from tvhome.core.intents import ComponentName, Intent
from tvhome.core.models.cascade import CapabilityProfile, CascadeOutcome, Strategy
from tvhome.core.models.config import VendorConfig
from tvhome.core.models.state import CascadePolicy

_log = _logging.getLogger(__name__)

SHUTDOWN_REASON = "userrequested"


class PowerOffCascade:
    """Builds and runs the power-off strategies.

    Vendor strategies enter the list only when the probe found a vendor
    surface; the standard and shell strategies are always present.
    """

    def __init__(
        self,
        activity: ActivityManagerInterface,
        vendor: VendorServicesInterface,
        power: PowerManagerInterface,
        shell: ShellInterface,
        probe: CapabilityProbe,
        config: VendorConfig,
        executor: StrategyCascadeExecutor | None = None,
    ) -> None:
        self._activity = activity
        self._vendor = vendor
        self._power = power
        self._shell = shell
        self._probe = probe
        self._config = config
        self._executor = executor or StrategyCascadeExecutor()
        self.last_outcome: CascadeOutcome | None = None

    def power_off(self) -> bool:
        profile = self._probe.detect_vendor()
        if profile.is_generic:
            _log.info("No vendor power surface detected; using standard routes only")
        outcome = self._executor.run(
            self.build_strategies(profile), CascadePolicy.RUN_ALL, cascade_name="power-off"
        )
        self.last_outcome = outcome
        return outcome.succeeded

    def build_strategies(self, profile: CapabilityProfile) -> list[Strategy]:
        strategies: list[Strategy] = []
        if not profile.is_generic:
            strategies.extend(self._vendor_strategies())

        def standard_request() -> None:
            self._activity.start_activity(
                Intent(
                    action=intents.ACTION_REQUEST_SHUTDOWN,
                    extras={intents.EXTRA_KEY_CONFIRM: False},
                ).with_flags(intents.FLAG_ACTIVITY_NEW_TASK)
            )

        def power_service() -> None:
            self._power.shutdown(confirm=False, reason=SHUTDOWN_REASON)

        strategies.append(Strategy("standard-shutdown-request", standard_request))
        strategies.append(Strategy("power-service", power_service))

        for command in self._config.shell_power_commands:
            strategies.append(Strategy(f"shell[{command}]", self._spawn(command, False)))
            strategies.append(Strategy(f"shell-su[{command}]", self._spawn(command, True)))
        return strategies

    def _vendor_strategies(self) -> list[Strategy]:
        strategies = [Strategy("vendor-low-level-power", self._vendor.low_level_power_off)]

        for code in self._config.power_state_codes:
            strategies.append(
                Strategy(
                    f"vendor-power-state[{code}]",
                    lambda c=code: self._vendor.set_power_state(c),
                )
            )

        for action in self._config.power_broadcast_actions:
            strategies.append(
                Strategy(
                    f"vendor-broadcast[{action}]",
                    lambda a=action: self._activity.send_broadcast(
                        Intent(action=a, extras={"powerState": "shutdown"})
                    ),
                )
            )

        def vendor_activity() -> None:
            self._activity.start_activity(
                Intent(
                    component=ComponentName(
                        self._config.tv_center_package, self._config.tv_center_activity
                    ),
                    extras={"from_launcher": True, "powerState": "shutdown"},
                ).with_flags(intents.FLAG_ACTIVITY_NEW_TASK)
            )

        strategies.append(Strategy("vendor-activity", vendor_activity))
        return strategies

    def _spawn(self, command: str, elevated: bool):
        def run() -> None:
            self._shell.spawn(command, elevated=elevated)

        return run
