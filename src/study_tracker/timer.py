"""Pomodoro countdown alternating study and break phases.

The engine is driven by a recurring one-second callback obtained from a
``TickScheduler``. Each arming of the timer gets its own token; cancelling a
token is idempotent and a callback that fires after its token was cancelled
is dropped, so a pause can never be followed by a stray tick.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from study_tracker.minutes import coerce_minutes
from study_tracker.models import Session
from study_tracker.notifications import Notifier, NullNotifier
from study_tracker.recorder import SessionRecorder
from study_tracker.sound import SoundService

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


class Phase(str, Enum):
    STUDY = "study"
    BREAK = "break"


class TimerState(str, Enum):
    IDLE = "idle"
    STUDY_RUNNING = "study_running"
    STUDY_PAUSED = "study_paused"
    BREAK_RUNNING = "break_running"
    BREAK_PAUSED = "break_paused"


RUNNING_STATES = {TimerState.STUDY_RUNNING, TimerState.BREAK_RUNNING}
BREAK_STATES = {TimerState.BREAK_RUNNING, TimerState.BREAK_PAUSED}


class SubjectRequiredError(ValueError):
    pass


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class TickScheduler(Protocol):
    def schedule(self, callback: Callable[[], None], interval: float) -> TickHandle: ...


class TickToken:
    def __init__(self) -> None:
        self.handle: TickHandle | None = None
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self.handle is not None:
            self.handle.cancel()


@dataclass(frozen=True)
class TimerEvent:
    kind: str
    phase: Phase
    time_left: int
    session: Session | None = None


def _local_now() -> datetime:
    return datetime.now().astimezone()


class TimerEngine:
    def __init__(
        self,
        recorder: SessionRecorder,
        scheduler: TickScheduler,
        *,
        study_minutes: int | None = 25,
        break_minutes: int | None = 5,
        sound: SoundService | None = None,
        notifier: Notifier | None = None,
        notifications_enabled: bool = True,
        clock: Callable[[], datetime] | None = None,
        on_event: Callable[[TimerEvent], None] | None = None,
    ) -> None:
        self._recorder = recorder
        self._scheduler = scheduler
        self._sound = sound or SoundService()
        self._notifier = notifier or NullNotifier()
        self._clock = clock or _local_now
        self._on_event = on_event
        self.notifications_enabled = notifications_enabled

        self._study_raw = study_minutes
        self._break_raw = break_minutes
        self.subject = ""
        self.questions = 0
        self.correct_questions = 0

        self._state = TimerState.IDLE
        self._token: TickToken | None = None
        self._phase_minutes = self.study_minutes
        self.time_left = self._phase_minutes * 60

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def phase(self) -> Phase:
        return Phase.BREAK if self._state in BREAK_STATES else Phase.STUDY

    @property
    def is_running(self) -> bool:
        return self._state in RUNNING_STATES

    @property
    def is_break(self) -> bool:
        return self.phase is Phase.BREAK

    @property
    def study_minutes(self) -> int:
        return coerce_minutes(self._study_raw)

    @property
    def break_minutes(self) -> int:
        return coerce_minutes(self._break_raw)

    @property
    def planned_minutes(self) -> int:
        """Length the current phase was started with."""
        return self._phase_minutes

    def select_subject(self, name: str) -> bool:
        if self.is_running:
            return False
        self.subject = name.strip()
        return True

    def set_questions(self, total: int, correct: int) -> None:
        self.questions = max(0, int(total))
        self.correct_questions = max(0, int(correct))

    def set_study_minutes(self, value: int | None) -> None:
        self._study_raw = value
        if not self.is_running and self.phase is Phase.STUDY:
            self._retarget(self.study_minutes)

    def set_break_minutes(self, value: int | None) -> None:
        self._break_raw = value
        if not self.is_running and self.phase is Phase.BREAK:
            self._retarget(self.break_minutes)

    def commit_study_minutes(self) -> int:
        self.set_study_minutes(coerce_minutes(self._study_raw))
        return self.study_minutes

    def commit_break_minutes(self) -> int:
        self.set_break_minutes(coerce_minutes(self._break_raw))
        return self.break_minutes

    def start(self) -> None:
        if self.is_running:
            return
        if self.phase is Phase.STUDY and not self.subject:
            raise SubjectRequiredError("Select a subject before starting a study session")

        if self.notifications_enabled and self._notifier.permission == "default":
            self._notifier.request_permission()
        if self.time_left <= 0:
            # left at zero by a failed completion; run the phase again
            self._retarget(self._phase_minutes)
        self._sound.play_start()
        self._state = TimerState.BREAK_RUNNING if self.phase is Phase.BREAK else TimerState.STUDY_RUNNING
        self._arm()
        self._emit(TimerEvent("started", self.phase, self.time_left))

    def pause(self) -> None:
        if not self.is_running:
            return
        self._disarm()
        self._state = self._paused_state()
        self._emit(TimerEvent("paused", self.phase, self.time_left))

    def stop(self) -> Session | None:
        """End the current phase early.

        A break is discarded. A study phase is recorded with its full planned
        length, exactly as if the countdown had reached zero.
        """
        self._sound.play_stop()
        phase = self.phase
        was_idle = self._state is TimerState.IDLE
        self._disarm()
        self._state = self._paused_state()

        session = None
        if phase is Phase.STUDY and not was_idle:
            session = self._finish_session()
        self._enter_idle()
        self._emit(TimerEvent("stopped", phase, self.time_left, session))
        return session

    def tick(self) -> None:
        if not self.is_running:
            return
        try:
            previous = self.time_left
            self.time_left = max(0, previous - 1)
            if previous > 0 and self.time_left == 0:
                self._complete()
        except Exception:
            logger.exception("timer tick failed, stopping the timer")
            self._disarm()
            self._state = self._paused_state()

    def close(self) -> None:
        self._disarm()
        if self.is_running:
            self._state = self._paused_state()

    def _complete(self) -> None:
        finished = self.phase
        self._sound.play_alarm()
        self._disarm()

        session = None
        if finished is Phase.STUDY:
            session = self._finish_session()
            self._state = TimerState.BREAK_PAUSED
            self._retarget(self.break_minutes)
        else:
            self._enter_idle()

        self._notify_completion(finished)
        self._emit(TimerEvent("completed", finished, 0, session))

    def _finish_session(self) -> Session | None:
        if not self.subject:
            return None
        session = self._recorder.record(
            subject=self.subject,
            planned_duration_minutes=self._phase_minutes,
            questions=self.questions,
            correct_questions=self.correct_questions,
            now=self._clock(),
        )
        self.questions = 0
        self.correct_questions = 0
        return session

    def _enter_idle(self) -> None:
        self._state = TimerState.IDLE
        self._retarget(self.study_minutes)

    def _retarget(self, minutes: int) -> None:
        self._phase_minutes = minutes
        self.time_left = minutes * 60

    def _paused_state(self) -> TimerState:
        if self._state is TimerState.IDLE:
            return TimerState.IDLE
        return TimerState.BREAK_PAUSED if self.phase is Phase.BREAK else TimerState.STUDY_PAUSED

    def _arm(self) -> None:
        self._disarm()
        token = TickToken()
        self._token = token

        def _fire() -> None:
            if token.cancelled or token is not self._token:
                return
            self.tick()

        token.handle = self._scheduler.schedule(_fire, TICK_SECONDS)

    def _disarm(self) -> None:
        token, self._token = self._token, None
        if token is not None:
            token.cancel()

    def _notify_completion(self, finished: Phase) -> None:
        if not self.notifications_enabled or self._notifier.permission != "granted":
            return
        if finished is Phase.STUDY:
            title, body = "Focus finished!", "Good work! Time for a break."
        else:
            title, body = "Break finished!", "Time to get back to studying."
        try:
            self._notifier.notify(title, body)
        except Exception:
            logger.exception("completion notification failed")

    def _emit(self, event: TimerEvent) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            logger.exception("timer event listener failed on %s", event.kind)
