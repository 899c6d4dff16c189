"""
Request deadline supervisor.

The pipeline has no cooperative cancellation. When a request overruns its
deadline the supervisor sweeps every workspace entry and marks the request
as answered, so a pipeline that finishes later cannot write a second
response. Work already in flight may keep running briefly in the background.

States: RUNNING -> COMPLETED (pipeline finished first)
        RUNNING -> TIMED_OUT (deadline fired first; terminal)

Sample input:
    supervisor = RequestSupervisor(manager, timeout_seconds=30).start()
    ...
    if supervisor.complete():
        send(result)

Expected output:
    complete() -> True when the pipeline beat the deadline, False otherwise
"""

import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, TypeVar

from loguru import logger

from repogist.core.results import SweepReport

T = TypeVar("T")


class RequestTimedOut(Exception):
    """The deadline fired before the pipeline finished."""


class Sweeper(Protocol):
    def sweep_all(self) -> SweepReport: ...


class SupervisorState(str, Enum):
    RUNNING = "running"
    TIMED_OUT = "timed_out"
    COMPLETED = "completed"


class RequestSupervisor:
    def __init__(self, sweeper: Sweeper, timeout_seconds: float):
        self.sweeper = sweeper
        self.timeout_seconds = timeout_seconds
        self._state = SupervisorState.RUNNING
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._settled = threading.Event()
        self.sweep_report: Optional[SweepReport] = None

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def timed_out(self) -> bool:
        return self._state is SupervisorState.TIMED_OUT

    def start(self) -> "RequestSupervisor":
        """Arm a background timer that calls expire() after the deadline."""
        self._timer = threading.Timer(self.timeout_seconds, self.expire)
        self._timer.daemon = True
        self._timer.start()
        return self

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def expire(self) -> bool:
        """Deadline reached. Returns True if this call performed the timeout."""
        with self._lock:
            if self._state is not SupervisorState.RUNNING:
                return False
            self._state = SupervisorState.TIMED_OUT
        self._cancel_timer()
        logger.warning(f"Request exceeded {self.timeout_seconds}s deadline, sweeping workspaces")
        try:
            self.sweep_report = self.sweeper.sweep_all()
        finally:
            self._settled.set()
        return True

    def complete(self) -> bool:
        """Pipeline finished. Returns False if the deadline already answered the request."""
        with self._lock:
            if self._state is not SupervisorState.RUNNING:
                logger.debug(f"Dropping late pipeline result (state={self._state.value})")
                return False
            self._state = SupervisorState.COMPLETED
        self._cancel_timer()
        self._settled.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the request completed or the deadline sweep finished."""
        return self._settled.wait(timeout)


def supervised(func: Callable[[], T], supervisor: RequestSupervisor) -> Callable[[], T]:
    """Wrap ``func`` so it reports completion to ``supervisor`` however it exits."""

    def run() -> T:
        try:
            return func()
        finally:
            if not supervisor.complete():
                logger.warning("Pipeline finished after the deadline; its result was discarded")

    return run


def run_with_deadline(func: Callable[[], T], sweeper: Sweeper, timeout_seconds: float) -> T:
    """
    Run ``func`` on a daemon thread under an armed supervisor.

    Raises:
        RequestTimedOut: The deadline fired first; every workspace was swept
        Exception: Whatever ``func`` raised, if it finished in time
    """
    supervisor = RequestSupervisor(sweeper, timeout_seconds)
    box: Dict[str, Any] = {}
    done = threading.Event()
    task = supervised(func, supervisor)

    def worker() -> None:
        try:
            box["value"] = task()
        except BaseException as e:
            box["error"] = e
        finally:
            done.set()

    supervisor.start()
    threading.Thread(target=worker, name="repogist-ingest", daemon=True).start()
    supervisor.wait()

    if supervisor.timed_out:
        raise RequestTimedOut(f"Request timed out after {timeout_seconds} seconds")
    # complete() runs just before the worker records its outcome
    done.wait()
    if "error" in box:
        raise box["error"]
    return box["value"]
