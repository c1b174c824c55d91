"""A small discrete-event simulation kernel: time, events, resolved signals, reports and traces."""

from __future__ import annotations

import enum
import heapq
import itertools
import re
import sys
from collections import deque
from fractions import Fraction
from functools import partial
from pathlib import Path
from typing import Any, Callable, Generator, Iterable, TextIO, Union

Delay = Union[int, str]
Process = Generator[Union[int, str, "Event"], None, None]


class Logic(str, enum.Enum):
    """Four-valued logic level of a wire."""

    ZERO = "0"
    ONE = "1"
    Z = "Z"
    X = "X"

    def __str__(self) -> str:
        return self.value


class Verbosity(enum.IntEnum):
    """Verbosity levels for informational reports."""

    NONE = 0
    LOW = 100
    MEDIUM = 200
    HIGH = 300
    FULL = 400
    DEBUG = 500


class Phase(enum.Enum):
    """Phases of a non-blocking transaction."""

    BEGIN_REQ = enum.auto()
    END_REQ = enum.auto()
    BEGIN_RESP = enum.auto()
    END_RESP = enum.auto()

    def __str__(self) -> str:
        return self.name


class SyncStatus(enum.Enum):
    """Return status of a non-blocking transport call."""

    ACCEPTED = enum.auto()
    UPDATED = enum.auto()
    COMPLETED = enum.auto()


class ReportError(RuntimeError):
    """Raised when an error is reported."""


_TIME_RE = re.compile(r"\s*([0-9.]+(?:[eE][-+]?[0-9]+)?)\s*([a-z]+)\s*")
_UNITS: dict[str, Fraction] = {
    "fs": Fraction(1, 1000),
    "ps": Fraction(1),
    "ns": Fraction(10**3),
    "us": Fraction(10**6),
    "ms": Fraction(10**9),
    "s": Fraction(10**12),
    "sec": Fraction(10**12),
}
_FORMAT_UNITS = (("s", 10**12), ("ms", 10**9), ("us", 10**6), ("ns", 10**3), ("ps", 1))


def parse_time(text: str) -> int:
    """Parse a time such as ``"10 us"`` or ``"30ns"`` into picoseconds."""
    match = _TIME_RE.fullmatch(text)
    if match is None or match[2] not in _UNITS:
        raise ValueError(f"invalid time: {text!r}")
    try:
        value = Fraction(match[1])
    except (ValueError, ZeroDivisionError):
        raise ValueError(f"invalid time: {text!r}") from None
    return round(value * _UNITS[match[2]])


def format_time(picoseconds: int) -> str:
    """Format picoseconds in the largest unit that keeps the value whole."""
    if picoseconds < 0:
        raise ValueError("time cannot be negative")
    if picoseconds == 0:
        return "0 s"
    for unit, factor in _FORMAT_UNITS:
        if picoseconds % factor == 0:
            return f"{picoseconds // factor} {unit}"
    raise AssertionError("unreachable")


def _to_ps(delay: Delay) -> int:
    if isinstance(delay, str):
        return parse_time(delay)
    if isinstance(delay, bool) or not isinstance(delay, int):
        raise TypeError(f"delay must be picoseconds or a time string, not {delay!r}")
    if delay < 0:
        raise ValueError("delay cannot be negative")
    return delay


def resolve(values: Iterable[Logic | str]) -> Logic:
    """Resolve the values of several drivers of one wire."""
    result = Logic.Z
    for raw in values:
        value = Logic(raw)
        if value is Logic.X:
            return Logic.X
        if value is Logic.Z:
            continue
        if result is Logic.Z:
            result = value
        elif result is not value:
            return Logic.X
    return result


class Event:
    """Something processes can wait on by yielding it."""

    def __init__(self, sim: Simulator, name: str = "") -> None:
        self.sim = sim
        self.name = name
        self._waiters: list[Callable[[], None]] = []

    def notify(self, delay: Delay = 0) -> None:
        """Wake every waiter after ``delay`` (zero means the next delta cycle)."""
        self.sim.schedule(delay, self._trigger)

    def _wait(self, resume: Callable[[], None]) -> None:
        self._waiters.append(resume)

    def _trigger(self) -> None:
        waiters, self._waiters = self._waiters, []
        for resume in waiters:
            resume()


class ResolvedSignal:
    """A wire with any number of drivers whose values are resolved together."""

    def __init__(self, sim: Simulator, name: str, initial: Logic | str = Logic.Z) -> None:
        self.sim = sim
        self.name = name
        self._value = Logic(initial)
        self._drivers: dict[Any, Logic] = {}
        self._pending: dict[Any, Logic] = {}
        self._watchers: list[Callable[[ResolvedSignal], None]] = []
        self.value_changed_event = Event(sim, f"{name}.value_changed")

    def read(self) -> Logic:
        return self._value

    def write(self, driver: Any, value: Logic | str) -> None:
        """Drive the wire from ``driver``; the change shows after the current delta."""
        level = Logic(value)
        if not self._pending:
            self.sim._request_update(self)
        self._pending[driver] = level

    def _update(self) -> None:
        self._drivers.update(self._pending)
        self._pending.clear()
        new = resolve(self._drivers.values())
        if new is not self._value:
            self._value = new
            self.value_changed_event.notify(0)
            for watcher in self._watchers:
                watcher(self)

    def __repr__(self) -> str:
        return f"ResolvedSignal({self.name!r}, {self._value.value!r})"


class Reporter:
    """Writes info, warning and error reports to a stream and optionally a log file."""

    def __init__(
        self,
        level: int = Verbosity.MEDIUM,
        stream: TextIO | None = None,
        log_path: str | Path | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.level = level
        self.stream = stream
        self.log_path = Path(log_path) if log_path is not None else None
        self.clock = clock
        self.messages: list[str] = []

    def _emit(self, severity: str, msg_id: Any, message: str) -> str:
        text = f"{severity}: {msg_id}: {message}"
        self.messages.append(text)
        print(text, file=self.stream if self.stream is not None else sys.stdout)
        if self.log_path is not None:
            with self.log_path.open("a", encoding="utf-8") as log:
                log.write(text + "\n")
        return text

    def info(self, verbosity: int, msg_id: Any, message: str) -> str | None:
        """Report ``message`` if ``verbosity`` is within the configured level."""
        if verbosity > self.level:
            return None
        if self.clock is not None:
            message = f"[{format_time(self.clock())}]: {message}"
        return self._emit("Info", msg_id, message)

    def warning(self, msg_id: Any, message: str) -> str:
        return self._emit("Warning", msg_id, message)

    def error(self, msg_id: Any, message: str) -> None:
        """Report an error and raise :class:`ReportError`."""
        raise ReportError(self._emit("Error", msg_id, message))


def _vcd_code(index: int) -> str:
    chars = []
    while True:
        index, rest = divmod(index, 94)
        chars.append(chr(33 + rest))
        if index == 0:
            return "".join(chars)
        index -= 1


class VcdTrace:
    """Records signal changes and writes them as a VCD file on close."""

    def __init__(self, path: str | Path) -> None:
        path = Path(path)
        self.path = path if path.suffix == ".vcd" else path.with_name(path.name + ".vcd")
        self._vars: list[tuple[str, str]] = []
        self._changes: list[tuple[int, str, Logic]] = []
        self._closed = False

    def add(self, signal: ResolvedSignal, name: str | None = None) -> None:
        if self._closed:
            raise ValueError("trace file already closed")
        code = _vcd_code(len(self._vars))
        self._vars.append((code, (name or signal.name).replace(" ", "_")))
        self._changes.append((signal.sim.now, code, signal.read()))

        def record(sig: ResolvedSignal) -> None:
            if not self._closed:
                self._changes.append((sig.sim.now, code, sig.read()))

        signal._watchers.append(record)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        lines = ["$timescale 1 ps $end", "$scope module top $end"]
        lines += [f"$var wire 1 {code} {name} $end" for code, name in self._vars]
        lines += ["$upscope $end", "$enddefinitions $end"]
        changes = sorted(self._changes, key=lambda change: change[0])
        for time, group in itertools.groupby(changes, key=lambda change: change[0]):
            lines.append(f"#{time}")
            lines += [f"{value.value.lower()}{code}" for _, code, value in group]
        self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def __enter__(self) -> VcdTrace:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Simulator:
    """Runs generator processes over simulated time with delta cycles."""

    def __init__(self, reporter: Reporter | None = None) -> None:
        self.now = 0
        self.stopped = False
        self.reporter = reporter if reporter is not None else Reporter(clock=lambda: self.now)
        self._runnable: deque[Callable[[], None]] = deque()
        self._delta: list[Callable[[], None]] = []
        self._timed: list[tuple[int, int, Callable[[], None]]] = []
        self._seq = itertools.count()
        self._updates: list[ResolvedSignal] = []

    def spawn(self, process: Process) -> Process:
        """Start a process; it yields delays or events to wait on."""
        self._runnable.append(partial(self._step, process))
        return process

    def _step(self, process: Process) -> None:
        if self.stopped:
            return
        try:
            command = next(process)
        except StopIteration:
            return
        resume = partial(self._step, process)
        if isinstance(command, Event):
            command._wait(resume)
        elif isinstance(command, (int, str)) and not isinstance(command, bool):
            self.schedule(command, resume)
        else:
            raise TypeError(f"process yielded {command!r}; expected a delay or an Event")

    def schedule(self, delay: Delay, callback: Callable[[], None]) -> None:
        """Call ``callback`` after ``delay``; zero means the next delta cycle."""
        picoseconds = _to_ps(delay)
        if picoseconds == 0:
            self._delta.append(callback)
        else:
            heapq.heappush(self._timed, (self.now + picoseconds, next(self._seq), callback))

    def _request_update(self, signal: ResolvedSignal) -> None:
        self._updates.append(signal)

    def run(self, until: Delay | None = None) -> None:
        """Run until nothing is left, :meth:`stop` is called, or absolute time ``until``."""
        limit = None if until is None else _to_ps(until)
        while not self.stopped:
            while self._runnable and not self.stopped:
                self._runnable.popleft()()
            if self.stopped:
                break
            updates, self._updates = self._updates, []
            for signal in updates:
                signal._update()
            if self._delta:
                self._runnable.extend(self._delta)
                self._delta.clear()
                continue
            if not self._timed or (limit is not None and self._timed[0][0] > limit):
                if limit is not None and limit > self.now:
                    self.now = limit
                break
            self.now = self._timed[0][0]
            while self._timed and self._timed[0][0] == self.now:
                self._runnable.append(heapq.heappop(self._timed)[2])

    def stop(self) -> None:
        self.stopped = True


class PayloadEventQueue:
    """Delivers transactions to a callback after a delay."""

    def __init__(self, sim: Simulator, callback: Callable[[Any, Phase], None]) -> None:
        self.sim = sim
        self.callback = callback

    def notify(self, trans: Any, phase: Phase, delay: Delay = 0) -> None:
        self.sim.schedule(delay, partial(self.callback, trans, phase))