"""Base class for devices attached to the virtual board."""

from __future__ import annotations

import abc
from typing import Any, Callable, Union

from .payload import Payload
from .pins import PinConfig, Pins
from .sim import (
    Delay,
    Event,
    Logic,
    Phase,
    PayloadEventQueue,
    ResolvedSignal,
    Simulator,
    SyncStatus,
    Verbosity,
    format_time,
    parse_time,
)

Transport = Callable[[Payload, Phase, Delay], "tuple[SyncStatus, Phase, Delay]"]


def _describe_delay(delay: Delay) -> str:
    return format_time(parse_time(delay) if isinstance(delay, str) else delay)


class _Port:
    """A pin of a device; bound to a board trace or to another port."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._bound: Union[ResolvedSignal, _Port, None] = None

    def bind(self, channel: Union[ResolvedSignal, _Port]) -> None:
        if channel is self:
            raise ValueError(f"port {self.name} cannot be bound to itself")
        if self._bound is not None:
            raise RuntimeError(f"port {self.name} is already bound")
        self._bound = channel

    @property
    def signal(self) -> ResolvedSignal:
        channel = self._bound
        while isinstance(channel, _Port):
            channel = channel._bound
        if channel is None:
            raise RuntimeError(f"port {self.name} is not bound")
        return channel

    def read(self) -> Logic:
        return self.signal.read()

    def write(self, value: Logic | str) -> None:
        self.signal.write(self, value)

    @property
    def value_changed_event(self) -> Event:
        return self.signal.value_changed_event

    def __repr__(self) -> str:
        return f"_Port({self.name!r})"


class PcbTarget(abc.ABC):
    """A device on the board that emulates pin waveforms for incoming transactions."""

    def __init__(self, sim: Simulator, name: str, pin_config: PinConfig | dict[str, str]) -> None:
        self.sim = sim
        self.name = name
        self.pin_config = PinConfig(pin_config)
        self.pin_value: dict[str, _Port] = {
            pin: _Port(f"{name}.{pin}") for pin in self.pin_config.to_pins()
        }
        self.peq = PayloadEventQueue(sim, self._peq_cb)
        self.hw_access_done_peq = PayloadEventQueue(sim, self._done_peq_cb)
        self.backward: Transport | None = None

    def pins(self) -> Pins:
        return self.pin_config.to_pins()

    def nb_transport_fw(self, trans: Payload, phase: Phase, delay: Delay) -> tuple[SyncStatus, Phase, Delay]:
        """Accept a forward call; returns the status with the updated phase and delay."""
        report = self.sim.reporter
        report.info(Verbosity.DEBUG, self.name, str(phase))
        if phase is Phase.BEGIN_REQ:
            report.info(Verbosity.DEBUG, self.name, f"putting trans into peq with delay: {_describe_delay(delay)}")
            self.peq.notify(trans, phase, delay)
            return SyncStatus.UPDATED, Phase.END_REQ, 0
        if phase is Phase.END_RESP:
            report.info(Verbosity.DEBUG, self.name, f"putting trans into peq with delay: {_describe_delay(delay)}")
            self.peq.notify(trans, phase, delay)
        return SyncStatus.ACCEPTED, phase, delay

    @abc.abstractmethod
    def hw_access(self, trans: Payload, phase: Phase) -> None:
        """Emulate the pin waveform for ``trans``; must end with :meth:`hw_access_done`."""

    def hw_access_done(self, trans: Payload) -> None:
        """Signal that the waveform for ``trans`` is finished."""
        self.hw_access_done_peq.notify(trans, Phase.BEGIN_RESP, 0)

    def _peq_cb(self, trans: Payload, phase: Phase) -> None:
        if phase is Phase.BEGIN_REQ:
            self.hw_access(trans, phase)
        elif phase is Phase.END_RESP:
            self.sim.reporter.info(Verbosity.MEDIUM, self.name, "ending simulation")
            self.sim.stop()

    def _done_peq_cb(self, trans: Payload, phase: Any) -> None:
        self.sim.reporter.info(Verbosity.DEBUG, self.name, "hw_access finished.")
        if self.backward is None:
            self.sim.reporter.error(self.name, "socket is not bound")
        self.backward(trans, Phase.BEGIN_RESP, 0)