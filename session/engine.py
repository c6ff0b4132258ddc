# session/engine.py
"""Supervision of one low-level installer run.

All process I/O happens on a dedicated background thread: spawning the
worker, writing the configuration line and the blocking line-by-line read of
its output. Every interpreted line is put on a ``queue.Queue`` in the order it
was read; the UI thread drains the queue with :meth:`InstallSession.poll_events`
and is the only place where screen state changes.

Worker output is read as bytes and decoded one line at a time, so a line that
is not valid UTF-8 is skipped like any other malformed line.

The worker's stdin is shared between the background thread (configuration)
and the UI thread (prompt answers), so every write goes through one lock.

Once the output ends both pipes are closed and the worker is reaped, except
after an abort, where the worker is left to finish on its own.
"""
from __future__ import annotations
import os
import queue
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Union
from session.codec import (
    ACK_REPLY, Error, Finished, Info, ParseError, Progress, Prompt, parse_raw_line,
)
from logger import log

EXITED_EARLY_TEXT = "low-level installer exited early"
WAIT_TIMEOUT = 10.0


class SessionState(Enum):
    NOT_STARTED = "not started"
    STARTING = "starting"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.SUCCEEDED, SessionState.FAILED, SessionState.ABORTED)


@dataclass(frozen=True)
class SpawnFailed:
    text: str


@dataclass(frozen=True)
class ExitedEarly:
    text: str = EXITED_EARLY_TEXT


UiEvent = Union[Info, Error, Prompt, Progress, Finished, SpawnFailed, ExitedEarly]


class InstallSession:
    """One run of the worker process, from spawn to its final verdict."""

    def __init__(
        self,
        command: Sequence[str],
        payload: str,
        env: Optional[Dict[str, str]] = None,
        events: Optional["queue.Queue[UiEvent]"] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.command = list(command)
        self.payload = payload
        self.env = env or {}
        self.events: "queue.Queue[UiEvent]" = events if events is not None else queue.Queue()
        self._popen = popen
        self._state = SessionState.NOT_STARTED
        self._state_lock = threading.Lock()
        self._stdin_lock = threading.Lock()
        self._stdin = None
        self._thread: Optional[threading.Thread] = None
        self.proc: Optional[subprocess.Popen] = None
        self.progress = 0

    # -- State ----------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    def _transition(self, new: SessionState) -> bool:
        with self._state_lock:
            if self._state.is_terminal:
                return False
            log.info("Session: %s -> %s", self._state.value, new.value)
            self._state = new
            return True

    # -- Lifecycle ------------------------------------------------------------

    def start(self) -> None:
        if self._state is not SessionState.NOT_STARTED:
            raise RuntimeError(f"session already {self._state.value}")
        self._transition(SessionState.STARTING)
        self._thread = threading.Thread(
            target=self._run, name="install-session", daemon=True
        )
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def abort(self) -> None:
        """Mark the session aborted; the worker itself is left alone."""
        if self._transition(SessionState.ABORTED):
            pid = self.proc.pid if self.proc is not None else None
            log.warning("Session aborted by user; worker pid %s not waited on", pid)

    def _emit(self, event: UiEvent) -> None:
        self.events.put(event)

    def _fail(self, event: UiEvent) -> None:
        self._transition(SessionState.FAILED)
        self._emit(event)

    def _run(self) -> None:
        log.info("Running: %s", " ".join(self.command))
        try:
            self.proc = self._popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                env={**os.environ, **self.env},
            )
        except OSError as e:
            log.error("Failed to start low-level installer: %s", e)
            self._fail(SpawnFailed(str(e)))
            return

        if self.proc.stdin is None or self.proc.stdout is None:
            log.error("Low-level installer pipes unavailable")
            self._fail(ExitedEarly())
            return

        self._stdin = self.proc.stdin
        self._transition(SessionState.RUNNING)

        if not self._write_line(self.payload):
            self._fail(ExitedEarly())
            self._close()
            return

        finished = False
        try:
            for raw in self.proc.stdout:
                event = parse_raw_line(raw)
                if isinstance(event, ParseError):
                    log.warning("low-level installer: %s", event)
                    continue
                if isinstance(event, Progress):
                    self.progress = max(self.progress, event.percent)
                elif isinstance(event, Finished):
                    finished = True
                    self.progress = 100
                    self._transition(
                        SessionState.SUCCEEDED if event.success else SessionState.FAILED
                    )
                self._emit(event)
        except (OSError, ValueError) as e:
            log.error("Reading from low-level installer failed: %s", e)

        if not finished:
            log.error(EXITED_EARLY_TEXT)
            self._fail(ExitedEarly())
        self._close()

    def _close(self) -> None:
        """Release both pipes and reap the worker once its output has ended."""
        with self._stdin_lock:
            stdin, self._stdin = self._stdin, None
        for pipe in (stdin, self.proc.stdout):
            try:
                pipe.close()
            except OSError as e:
                log.warning("Closing low-level installer pipe failed: %s", e)

        if self._state is SessionState.ABORTED:
            log.info("Session aborted; not waiting for worker pid %s", self.proc.pid)
            return
        try:
            code = self.proc.wait(timeout=WAIT_TIMEOUT)
        except subprocess.TimeoutExpired:
            log.warning("Low-level installer pid %s still running after %.0fs",
                        self.proc.pid, WAIT_TIMEOUT)
            return
        log.info("Low-level installer exited with code %s", code)

    # -- Worker input ---------------------------------------------------------

    def _write_line(self, line: str) -> bool:
        with self._stdin_lock:
            if self._stdin is None:
                return False
            try:
                self._stdin.write((line + "\n").encode("utf-8"))
                self._stdin.flush()
            except (OSError, ValueError) as e:
                log.warning("Writing to low-level installer failed: %s", e)
                return False
        return True

    def reply(self, yes: bool) -> bool:
        """Answer the pending prompt; safe to call from the UI thread."""
        log.info("Prompt answered: %s", "yes" if yes else "no")
        return self._write_line(ACK_REPLY if yes else "")

    # -- UI side --------------------------------------------------------------

    def poll_events(self) -> List[UiEvent]:
        """Everything queued so far, oldest first; never blocks."""
        events: List[UiEvent] = []
        while True:
            try:
                events.append(self.events.get_nowait())
            except queue.Empty:
                return events
