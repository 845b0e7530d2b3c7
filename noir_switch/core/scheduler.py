"""Scheduling of day/night camera transitions."""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from functools import partial

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore[import-untyped]
from apscheduler.triggers.date import DateTrigger  # type: ignore[import-untyped]

from ..hardware.camera import ModeSwitcher
from ..sun.transition import DEFAULT_POLAR_RETRY_SECONDS, compute_next_transition
from .config import LocationConfig
from .debug import debug_print, format_utc
from .models import CameraMode, SchedulerState, SunEvent, Transition

JOB_ID = "transition_job"

Planner = Callable[[LocationConfig, datetime], Transition]


class SchedulerError(RuntimeError):
    """Raised when the scheduler is driven out of order."""


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


class TransitionScheduler:
    """Keeps the camera mode in step with sunrise and sunset.

    Exactly one transition is armed at a time. Each time it fires, its mode is
    applied, the next transition is planned and a new deadline is armed.

    Args:
        location: Location used for sunrise/sunset calculation
        camera: Capability that switches the camera mode
        planner: Function returning the next transition for (location, now)
        clock: Function returning the current UTC time
        grace_seconds: Delay added to each deadline so it never fires early
        polar_retry_seconds: Re-plan interval when the sun neither rises nor sets
    """

    def __init__(
        self,
        location: LocationConfig,
        camera: ModeSwitcher,
        *,
        planner: Planner | None = None,
        clock: Callable[[], datetime] = utc_now,
        grace_seconds: float = 1.0,
        polar_retry_seconds: int = DEFAULT_POLAR_RETRY_SECONDS,
    ) -> None:
        self.location = location
        self.camera = camera
        self.planner = planner or partial(
            compute_next_transition, polar_retry_seconds=polar_retry_seconds
        )
        self.clock = clock
        self.grace_seconds = grace_seconds
        self.state = SchedulerState.IDLE
        self.armed: Transition | None = None
        self.mode: CameraMode | None = None
        self._scheduler: AsyncIOScheduler | None = None
        self._deadline: asyncio.Event | None = None

    def _plan(self) -> Transition:
        return self.planner(self.location, self.clock())

    def _apply(self, mode: CameraMode) -> None:
        try:
            self.camera.apply_mode(mode)
        except Exception:
            # Hardware failures are fatal, nothing further is scheduled
            self.state = SchedulerState.STOPPED
            raise
        self.mode = mode

    def start(self) -> Transition:
        """Set the camera to the mode for the current time and arm the first transition.

        The process may start at any point of the day: the mode applied now is
        the opposite of the one the next transition switches to.
        """
        if self.state is not SchedulerState.IDLE:
            raise SchedulerError(f"Cannot start scheduler in state {self.state.value}")

        transition = self._plan()
        mode = transition.current_mode
        print(f"Starting up with {mode.label} camera")
        self._apply(mode)

        self.armed = transition
        self.state = SchedulerState.ARMED
        return transition

    def fire(self) -> Transition:
        """Apply the armed transition, then plan and arm the next one."""
        if self.state is SchedulerState.FIRING:
            raise SchedulerError("Transition already in progress")
        if self.state is not SchedulerState.ARMED or self.armed is None:
            raise SchedulerError("No transition armed")

        transition = self.armed
        self.state = SchedulerState.FIRING
        if transition.event is SunEvent.RECHECK and self.mode is transition.state:
            debug_print(f"Still no sunrise/sunset, keeping {transition.state.label} camera")
        else:
            self._apply(transition.state)

        self.armed = self._plan()
        self.state = SchedulerState.ARMED
        return self.armed

    def seconds_until(self, transition: Transition) -> float:
        """Seconds from now until `transition` fires (negative if already due)."""
        return (transition.fires - self.clock()).total_seconds()

    async def _on_deadline(self) -> None:
        if self._deadline is not None:
            self._deadline.set()

    def _arm(self, transition: Transition) -> None:
        """Schedule the single deadline job for `transition`."""
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler()
            self._scheduler.start()

        run_date = transition.fires + timedelta(seconds=self.grace_seconds)
        self._scheduler.add_job(
            self._on_deadline,
            trigger=DateTrigger(run_date=run_date),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,  # A deadline already in the past fires at once
        )

        delay_ms = int(self.seconds_until(transition) * 1000)
        grace_ms = int(self.grace_seconds * 1000)
        if transition.event is SunEvent.RECHECK:
            print(f"No sunrise or sunset here, checking again at {format_utc(transition.fires)}")
        else:
            print(f"Firing update to {transition.state.label} at {format_utc(transition.fires)}")
        print(f"(in {delay_ms} + {grace_ms} ms)")

    async def _wait_for_deadline(self, shutdown_event: asyncio.Event | None) -> bool:
        """Wait for the armed deadline. Returns False if shutdown was requested first."""
        assert self._deadline is not None
        deadline_task = asyncio.ensure_future(self._deadline.wait())
        waiters = {deadline_task}
        if shutdown_event is not None:
            waiters.add(asyncio.ensure_future(shutdown_event.wait()))

        done, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()

        if shutdown_event is not None and shutdown_event.is_set():
            return False
        return deadline_task in done

    async def run(self, shutdown_event: asyncio.Event | None = None) -> None:
        """Run the transition loop until `shutdown_event` is set (or forever).

        Errors raised while switching the camera propagate to the caller.
        """
        if self.state is SchedulerState.IDLE:
            self.start()

        self._deadline = asyncio.Event()
        try:
            while self.state is SchedulerState.ARMED and self.armed is not None:
                self._deadline.clear()
                self._arm(self.armed)
                if not await self._wait_for_deadline(shutdown_event):
                    break
                self.fire()
        finally:
            self.stop()

    def stop(self) -> None:
        """Cancel the pending deadline and shut down the timer."""
        if self._scheduler is not None:
            if self._scheduler.get_job(JOB_ID) is not None:
                self._scheduler.remove_job(JOB_ID)
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None
        self.state = SchedulerState.STOPPED
