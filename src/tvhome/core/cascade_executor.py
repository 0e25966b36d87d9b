"""StrategyCascadeExecutor — ordered, fault-tolerant multi-strategy runner.

Key behaviours:
* Strategies run strictly in order, one at a time, on the caller thread.
* A strategy that raises is recorded as a failed attempt; the cascade
  carries on.
* ``FIRST_SUCCESS`` stops at the first strategy that returns normally.
* ``RUN_ALL`` runs everything and succeeds if any attempt did.
* The executor itself never raises.
"""

from __future__ import annotations

import logging as _logging
from typing import Sequence

from tvhome.core.errors import CascadeExhausted, StrategyFailed, describe_error
from tvhome.core.models.cascade import AttemptRecord, CascadeOutcome, Strategy
from tvhome.core.models.state import CascadePolicy
from tvhome.log_config.logger import ContextualLogger

_log = _logging.getLogger(__name__)


class StrategyCascadeExecutor:
    """Runs a strategy list under a :class:`CascadePolicy`."""

    def run(
        self,
        strategies: Sequence[Strategy],
        policy: CascadePolicy,
        cascade_name: str = "cascade",
    ) -> CascadeOutcome:
        log = ContextualLogger(_log, cascade=cascade_name)
        attempts: list[AttemptRecord] = []

        for strategy in strategies:
            record = self._attempt(strategy, log.bind(strategy=strategy.name))
            attempts.append(record)
            if record.ok and policy is CascadePolicy.FIRST_SUCCESS:
                break

        outcome = CascadeOutcome(
            attempts=tuple(attempts),
            succeeded=any(a.ok for a in attempts),
        )
        self._log_outcome(outcome, policy, cascade_name, log)
        return outcome

    @staticmethod
    def _attempt(strategy: Strategy, log: ContextualLogger) -> AttemptRecord:
        try:
            strategy.run()
        except Exception as exc:
            failure = StrategyFailed(strategy.name, exc)
            log.warning("%s", failure)
            return AttemptRecord(
                strategy_name=strategy.name, ok=False, error_message=describe_error(exc)
            )
        log.debug("completed")
        return AttemptRecord(strategy_name=strategy.name, ok=True)

    @staticmethod
    def _log_outcome(
        outcome: CascadeOutcome,
        policy: CascadePolicy,
        cascade_name: str,
        log: ContextualLogger,
    ) -> None:
        if outcome.succeeded:
            log.info(
                "Succeeded (%s, %d attempts, first ok: %s)",
                policy.value,
                len(outcome.attempts),
                outcome.winning_strategy,
            )
        elif policy is CascadePolicy.FIRST_SUCCESS:
            log.error("%s", CascadeExhausted(cascade_name, len(outcome.attempts)))
        else:
            log.error("No strategy completed (%d attempted)", len(outcome.attempts))
