"""
Countdown controller: the deferred, undoable class deletion of one session.

States move Idle -> Pending -> Executing -> Idle | Failed, and Failed -> Idle
through undo, dismiss or a successful retry. The controller owns every
transition; the store adapter, the ticker and the delete executor only
report back to it.
"""

import math
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..core.entities import CountdownRecord
from ..core.enums import CountdownState, DeleteScope, DEFAULT_DURATION_SECONDS, MAX_DURATION_SECONDS
from ..core.exceptions import PersistenceError, StateTransitionError, ValidationError
from ..persistence.countdown_store import CountdownStoreAdapter
from ..utils.logger import get_logger
from .delete_executor import DeleteExecutor, DeleteOutcome
from .ticker import Ticker

logger = get_logger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CountdownView:
    """Read-only state exposed to presentation."""
    state: CountdownState
    active: bool
    target_id: Optional[str]
    scope: Optional[DeleteScope]
    message: str
    seconds_left: int
    error: str


class CountdownController:
    """Public API of the deferred delete: ``start``, ``undo``, ``dismiss``."""

    def __init__(self, store_adapter: CountdownStoreAdapter, executor: DeleteExecutor,
                 default_duration_seconds: int = DEFAULT_DURATION_SECONDS,
                 tick_interval_seconds: float = 0.25,
                 clock: Optional[Clock] = None,
                 session_id: Optional[str] = None):
        self._store_adapter = store_adapter
        self._executor = executor
        self._default_duration = default_duration_seconds
        self._clock = clock or system_clock
        self._session_id = session_id or str(uuid.uuid4())

        self._state = CountdownState.IDLE
        self._record = CountdownRecord.inactive()
        self._seconds_left = 0
        self._in_flight = False
        self._observers: Dict[str, Callable[[CountdownView], None]] = {}
        self._ticker = Ticker(tick_interval_seconds, self.tick, name=f"countdown-{self._session_id}")

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> CountdownState:
        return self._state

    @property
    def record(self) -> CountdownRecord:
        return self._record

    @property
    def seconds_left(self) -> int:
        return self._seconds_left

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    def snapshot(self) -> CountdownView:
        return CountdownView(
            state=self._state,
            active=self._record.active,
            target_id=self._record.target_id,
            scope=self._record.scope,
            message=self._record.message,
            seconds_left=self._seconds_left,
            error=self._record.error,
        )

    def add_observer(self, observer_id: str, callback: Callable[[CountdownView], None]) -> None:
        """Call ``callback`` with a fresh view after every change."""
        self._observers[observer_id] = callback

    def remove_observer(self, observer_id: str) -> None:
        self._observers.pop(observer_id, None)

    # Public operations

    def start(self, target_id: Optional[str], scope, message: Optional[str] = None,
              duration_seconds: Optional[float] = None) -> bool:
        """Begin a countdown for ``target_id``. Returns False when ignored."""
        if not target_id or not scope:
            logger.debug("Ignoring start without target or scope")
            return False
        try:
            scope = DeleteScope.parse(scope)
        except ValueError:
            raise ValidationError(f"Unknown delete scope: {scope!r}", error_code="invalid_scope")

        if self._state not in (CountdownState.IDLE, CountdownState.FAILED):
            logger.info(
                "Ignoring start for class %s: countdown for %s is %s",
                target_id, self._record.target_id, self._state.value,
            )
            return False

        duration = self._resolve_duration(duration_seconds)
        ends_at_ms = self._clock() + int(round(duration * 1000))
        record = CountdownRecord.pending(str(target_id), scope, message, ends_at_ms)

        self._enter_pending(record)
        self._persist(record)
        logger.info("Countdown started for class %s (%ss, scope=%s)", target_id, duration, scope.value)
        return True

    async def tick(self) -> None:
        """Recompute the remaining time and execute once it reaches zero."""
        if self._state is not CountdownState.PENDING:
            return
        seconds_left = self._record.seconds_left(self._clock())
        if seconds_left != self._seconds_left:
            self._seconds_left = seconds_left
            self._notify()

        if seconds_left > 0 or self._in_flight or self._record.error:
            return
        await self._execute()

    def undo(self) -> bool:
        """Cancel a pending or failed deletion without calling the server."""
        if self._state is CountdownState.EXECUTING:
            logger.info("Undo refused for class %s: delete already in flight", self._record.target_id)
            return False
        if self._state is CountdownState.IDLE:
            return False
        logger.info("Countdown for class %s undone", self._record.target_id)
        self._reset(persist=True)
        return True

    def dismiss(self) -> bool:
        """Discard a failed deletion. Same transition as ``undo``."""
        return self.undo()

    async def retry(self) -> DeleteOutcome:
        """Re-run the delete of a failed countdown immediately."""
        if self._state is not CountdownState.FAILED:
            raise StateTransitionError(
                f"Cannot retry from {self._state.value} state", error_code="invalid_transition"
            )
        self._record = self._record.without_error()
        logger.info("Retrying delete of class %s", self._record.target_id)
        return await self._execute()

    async def restore(self) -> CountdownView:
        """Resume a countdown persisted before this session started.

        A record that fell due while no session was running is executed
        immediately.
        """
        if self._state is not CountdownState.IDLE:
            return self.snapshot()
        record = self._store_adapter.load()
        if record is None:
            return self.snapshot()

        self._enter_pending(record)
        logger.info("Restored countdown for class %s (%ss left)", record.target_id, self._seconds_left)
        if self._seconds_left <= 0:
            await self._execute()
        return self.snapshot()

    def apply_remote(self, record: Optional[CountdownRecord]) -> None:
        """Mirror a countdown written by a sibling session. ``None`` means cleared."""
        if self._state is CountdownState.EXECUTING:
            # The running call settles the state once it returns.
            self._record = record or CountdownRecord.inactive()
            return

        if record is None:
            if self._state is not CountdownState.IDLE:
                logger.info("Countdown for class %s cleared by another session", self._record.target_id)
                self._reset(persist=False)
            return

        if self._state is CountdownState.PENDING and self._record.same_cycle(record):
            if record.message != self._record.message:
                self._record = record
                self._notify()
            return

        logger.info("Adopting countdown for class %s from another session", record.target_id)
        self._enter_pending(record)

    def close(self) -> None:
        """Stop ticking. Persisted state is left for the next session."""
        self._ticker.stop()
        self._observers.clear()

    # Internals

    def _resolve_duration(self, duration_seconds) -> float:
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, (int, float)):
            return self._default_duration
        if isinstance(duration_seconds, float) and not math.isfinite(duration_seconds):
            return self._default_duration
        return min(MAX_DURATION_SECONDS, max(1, duration_seconds))

    def _enter_pending(self, record: CountdownRecord) -> None:
        self._record = record.without_error()
        self._seconds_left = record.seconds_left(self._clock())
        self._state = CountdownState.PENDING
        self._ticker.start()
        self._notify()

    async def _execute(self) -> DeleteOutcome:
        record = self._record
        self._in_flight = True
        self._state = CountdownState.EXECUTING
        self._seconds_left = 0
        self._ticker.stop()
        self._notify()
        try:
            outcome = await self._executor.execute(record.target_id, record.scope)
        finally:
            self._in_flight = False
        self._settle(record, outcome)
        return outcome

    def _settle(self, executed: CountdownRecord, outcome: DeleteOutcome) -> None:
        if not self._record.same_cycle(executed):
            # Another session cleared or replaced the countdown mid-flight.
            logger.info("Countdown changed while deleting class %s", executed.target_id)
            if self._record.active:
                self._enter_pending(self._record)
            else:
                self._reset(persist=False)
            return

        if outcome.succeeded:
            logger.info("Class %s deleted (%s)", executed.target_id, outcome.kind.value)
            self._reset(persist=True)
            return

        self._record = executed.with_error(outcome.message)
        self._seconds_left = 0
        self._state = CountdownState.FAILED
        self._ticker.stop()
        # Same deadline as before, so sibling sessions see no change.
        self._persist(executed)
        self._notify()

    def _reset(self, persist: bool) -> None:
        self._ticker.stop()
        self._record = CountdownRecord.inactive()
        self._seconds_left = 0
        self._state = CountdownState.IDLE
        if persist:
            self._persist(self._record)
        self._notify()

    def _persist(self, record: CountdownRecord) -> None:
        try:
            self._store_adapter.save(record)
        except PersistenceError as e:
            logger.warning("Could not persist countdown for class %s: %s", record.target_id, e.message)

    def _notify(self) -> None:
        if not self._observers:
            return
        view = self.snapshot()
        for observer_id, callback in list(self._observers.items()):
            try:
                callback(view)
            except Exception:
                logger.exception("Error notifying countdown observer %s", observer_id)
