"""Scope profiler writing Chrome trace-event JSON files."""

from __future__ import annotations

import atexit
import functools
import logging
import threading
import time
from dataclasses import dataclass
from typing import IO, Optional

_log = logging.getLogger("remcengine")

_HEADER = '{"otherData": {},"traceEvents":[{}'
_FOOTER = "]}"


@dataclass
class ProfileResult:
    """One timed scope: start in microseconds, elapsed whole microseconds."""

    name: str
    start: float
    elapsed_time: int
    thread_id: int


@dataclass
class InstrumentationSession:
    name: str


class Instrumentor:
    """Collects profile results into the file of the open session."""

    _instance: Optional["Instrumentor"] = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._session: Optional[InstrumentationSession] = None
        self._stream: Optional[IO[str]] = None

    @classmethod
    def get(cls) -> "Instrumentor":
        """Return the process-wide instrumentor."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
                atexit.register(cls._instance.end_session)
            return cls._instance

    @property
    def current_session(self) -> Optional[InstrumentationSession]:
        return self._session

    def begin_session(self, name: str, filepath="results.json") -> None:
        with self._lock:
            if self._session is not None:
                # Close the open session first so its output stays well formed.
                _log.error(
                    "Instrumentor.begin_session('%s') when session '%s' already open.",
                    name,
                    self._session.name,
                )
                self._end_session_locked()
            try:
                self._stream = open(filepath, "w", encoding="utf-8")
            except OSError:
                _log.error("Instrumentor could not open results file '%s'.", filepath)
                return
            self._session = InstrumentationSession(name)
            self._stream.write(_HEADER)
            self._stream.flush()

    def end_session(self) -> None:
        with self._lock:
            self._end_session_locked()

    def write_profile(self, result: ProfileResult) -> None:
        entry = (
            ",{"
            '"cat":"function",'
            f'"dur":{result.elapsed_time},'
            f'"name":"{result.name}",'
            '"ph":"X",'
            '"pid":0,'
            f'"tid":{result.thread_id},'
            f'"ts":{result.start:.3f}'
            "}"
        )
        with self._lock:
            if self._session is not None and self._stream is not None:
                self._stream.write(entry)
                self._stream.flush()

    def _end_session_locked(self) -> None:
        if self._session is None:
            return
        if self._stream is not None:
            self._stream.write(_FOOTER)
            self._stream.close()
            self._stream = None
        self._session = None


class InstrumentationTimer:
    """Times a scope and reports it when stopped or when the with-block ends."""

    def __init__(self, name: str, instrumentor: Optional[Instrumentor] = None) -> None:
        self.name = name
        self._instrumentor = instrumentor
        self._start_ns = time.monotonic_ns()
        self.stopped = False

    def stop(self) -> ProfileResult:
        end_ns = time.monotonic_ns()
        result = ProfileResult(
            name=self.name,
            start=self._start_ns / 1000.0,
            elapsed_time=end_ns // 1000 - self._start_ns // 1000,
            thread_id=threading.get_ident(),
        )
        (self._instrumentor or Instrumentor.get()).write_profile(result)
        self.stopped = True
        return result

    def __enter__(self) -> "InstrumentationTimer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.stopped:
            self.stop()


def cleanup_output_string(expr: str, remove: str) -> str:
    """Drop occurrences of ``remove`` and turn double quotes into single quotes."""
    out = []
    i = 0
    n = len(expr)
    while i < n:
        if expr.startswith(remove, i):
            i += len(remove)
            if i >= n:
                break
        ch = expr[i]
        out.append("'" if ch == '"' else ch)
        i += 1
    return "".join(out)


def profile_scope(name: str) -> InstrumentationTimer:
    """Timer for a with-block, reported to the shared instrumentor."""
    return InstrumentationTimer(cleanup_output_string(name, "__cdecl "))


def profile_function(func):
    """Decorator timing every call of ``func`` under its qualified name."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with profile_scope(func.__qualname__):
            return func(*args, **kwargs)

    return wrapper