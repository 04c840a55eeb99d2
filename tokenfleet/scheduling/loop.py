"""
Daily scheduler loop.

Two-state machine wrapping the cycle orchestrator:

    RUNNING_CYCLE --(cycle returns)--> WAITING --(start + period reached)--> RUNNING_CYCLE

The WAITING state emits a countdown status snapshot every tick. stop() ends
either state at once: a running cycle is cancelled mid-slot and a wait returns
early. Nothing is persisted, so an interrupted process simply starts a fresh
cycle on restart.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from ..engine import CycleOrchestrator
from ..events import EventEmitter, StatusSnapshot, WalletSummary
from ..logging.config import get_scheduler_logger, log_state_transition
from ..models.deployment import CycleRecord, SigningIdentity
from ..utils.time import Clock, SystemClock, format_countdown, format_utc, seconds_until

DEFAULT_PERIOD = timedelta(hours=24)
DEFAULT_TICK_SECONDS = 1.0


class SchedulerState(str, Enum):
    """Scheduler loop states."""
    RUNNING_CYCLE = "running_cycle"
    WAITING = "waiting"


@dataclass(frozen=True)
class SchedulerTransition:
    """One recorded state change."""
    from_state: SchedulerState
    to_state: SchedulerState
    at: datetime


class SchedulerLoop:
    """Runs a cycle, waits out the period with a live countdown, repeats."""

    def __init__(
        self,
        orchestrator: CycleOrchestrator,
        identities: Sequence[SigningIdentity],
        clock: Optional[Clock] = None,
        period: timedelta = DEFAULT_PERIOD,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        emitter: Optional[EventEmitter] = None,
        balance_fn: Optional[Callable[[SigningIdentity], Awaitable[int]]] = None,
    ) -> None:
        if period <= timedelta(0):
            raise ValueError("period must be positive")
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")

        self.orchestrator = orchestrator
        self.identities = tuple(identities)
        self.clock = clock or SystemClock()
        self.period = period
        self.tick_seconds = tick_seconds
        self.emitter = emitter or EventEmitter()
        self.balance_fn = balance_fn
        self.logger = get_scheduler_logger(__name__)

        self.state = SchedulerState.RUNNING_CYCLE
        self.cycle_start: Optional[datetime] = None
        self.next_cycle_at: Optional[datetime] = None
        self.cycles_run = 0
        self.last_record: Optional[CycleRecord] = None
        self.transitions: list[SchedulerTransition] = []

        self._balances: dict[str, Optional[int]] = {}
        self._stop_event = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request shutdown; an in-progress cycle or wait ends immediately."""
        if not self._stop_event.is_set():
            self.logger.info("Stop requested", state=self.state.value)
            self._stop_event.set()

    async def run(self, max_cycles: Optional[int] = None) -> None:
        """
        Run cycles until stopped.

        Args:
            max_cycles: Stop after this many cycles instead of looping forever
        """
        self._emit_status(countdown=None)

        while not self.stopped:
            self.cycle_start = self.clock.now()
            await self._run_cycle()
            if self.stopped:
                break

            if max_cycles is not None and self.cycles_run >= max_cycles:
                self.logger.info("Cycle limit reached", cycles_run=self.cycles_run)
                break

            self.next_cycle_at = self.cycle_start + self.period
            self._transition(SchedulerState.WAITING, trigger="cycle_complete")

            await self._wait_until(self.next_cycle_at)
            if self.stopped:
                break

            self._transition(SchedulerState.RUNNING_CYCLE, trigger="period_elapsed")

        self.logger.info("Scheduler loop exited", cycles_run=self.cycles_run, state=self.state.value)

    async def _run_cycle(self) -> None:
        self.emitter.info(f"Cycle {self.cycles_run + 1} starting at {format_utc(self.cycle_start)}")
        cycle = asyncio.ensure_future(self.orchestrator.run_cycle(self.identities))
        try:
            if await self._until_stopped(cycle):
                self.last_record = cycle.result()
            else:
                self.logger.warning("Cycle interrupted by stop request", cycle=self.cycles_run + 1)
                self.emitter.warn(f"Cycle {self.cycles_run + 1} interrupted; shutting down")
                return
        except Exception as e:
            # The orchestrator isolates slot failures itself; this only guards the loop
            self.logger.error(
                "Unexpected error during cycle",
                error=str(e),
                error_type=type(e).__name__
            )
            self.emitter.error(f"Cycle aborted unexpectedly: {e}", error_type=type(e).__name__)
        finally:
            self.cycles_run += 1

        await self._refresh_balances()

    async def _wait_until(self, target: datetime) -> None:
        """Hold until ``target`` with one countdown snapshot per tick."""
        while not self.stopped:
            remaining = seconds_until(target, self.clock.now())
            if remaining <= 0:
                return

            self._emit_status(countdown=format_countdown(timedelta(seconds=remaining)))
            await self._until_stopped(asyncio.ensure_future(
                self.clock.sleep(min(self.tick_seconds, remaining))
            ))

    async def _until_stopped(self, work: asyncio.Future) -> bool:
        """
        Await ``work`` unless stop() fires first.

        Returns True when ``work`` finished; otherwise it has been cancelled
        and awaited before returning False.
        """
        stopper = asyncio.ensure_future(self._stop_event.wait())
        try:
            done, _ = await asyncio.wait({work, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [task for task in (work, stopper) if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        return work in done

    async def _refresh_balances(self) -> None:
        if self.balance_fn is None:
            return
        for identity in self.identities:
            try:
                self._balances[identity.address] = await self.balance_fn(identity)
            except Exception as e:
                self.logger.warning(
                    "Balance refresh failed",
                    wallet=identity.address,
                    error=str(e)
                )
                self._balances[identity.address] = None

    def wallet_summaries(self) -> tuple[WalletSummary, ...]:
        """Per-wallet status built from the last cycle and cached balances."""
        summaries = []
        for identity in self.identities:
            outcomes = self.last_record.outcomes_for(identity.address) if self.last_record else []
            summaries.append(WalletSummary(
                address=identity.address,
                balance_wei=self._balances.get(identity.address),
                deployed=sum(1 for o in outcomes if o.contract is not None),
                failed=sum(1 for o in outcomes if not o.succeeded),
            ))
        return tuple(summaries)

    def _emit_status(self, countdown: Optional[str]) -> None:
        self.emitter.status(StatusSnapshot(
            wallet_summaries=self.wallet_summaries(),
            next_cycle_eta=self.next_cycle_at,
            countdown=countdown,
            timestamp=self.clock.now(),
        ))

    def _transition(self, to_state: SchedulerState, trigger: str) -> None:
        from_state = self.state
        self.state = to_state
        self.transitions.append(SchedulerTransition(from_state, to_state, self.clock.now()))

        log_state_transition(
            self.logger,
            from_state=from_state.value,
            to_state=to_state.value,
            trigger=trigger,
            context={
                "cycles_run": self.cycles_run,
                "next_cycle_at": self.next_cycle_at.isoformat() if self.next_cycle_at else None,
            }
        )
