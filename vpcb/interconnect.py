"""The virtual board: routes transactions to devices by pin and wires up traces."""

from __future__ import annotations

from functools import partial
from typing import Any

from .payload import Payload
from .pins import Pins
from .sim import Delay, Phase, ResolvedSignal, Simulator, SyncStatus, VcdTrace, Verbosity
from .target import PcbTarget


class PcbInterconnect:
    """Connects initiators to the targets whose pins a transaction names."""

    def __init__(self, sim: Simulator, name: str, trace: VcdTrace | None = None) -> None:
        self.sim = sim
        self.name = name
        self.trace = trace
        self.n_targs = 0
        self.n_inits = 0
        self.target_id: dict[Pins, int] = {}
        self.trace_value: dict[str, ResolvedSignal] = {}
        self._targets: list[PcbTarget] = []
        self._initiators: list[Any] = []

    def bind_target(self, target: PcbTarget) -> int:
        """Attach ``target``: join its pins to the board traces and route to it."""
        pins = target.pins()
        for pin in pins:
            signal = self.trace_value.get(pin)
            if signal is None:
                signal = self.trace_value[pin] = ResolvedSignal(self.sim, pin)
                if self.trace is not None:
                    self.trace.add(signal, pin)
            port = target.pin_value[pin]
            port.bind(signal)
            self.sim.reporter.info(
                Verbosity.DEBUG, self.name, f"bind target pin {port.name} to trace {signal.name}"
            )
        index = self.n_inits
        self.target_id[pins] = index
        self.n_inits += 1
        self._targets.append(target)
        target.backward = partial(self.nb_transport_bw, index)
        return index

    def bind_initiator(self, initiator: Any) -> int:
        """Attach an initiator and return the id its forward calls carry."""
        self._initiators.append(initiator)
        return len(self._initiators) - 1

    def end_of_elaboration(self) -> None:
        self.n_targs = len(self._initiators)
        if self.n_inits != len(self._targets):
            raise RuntimeError("target bindings are inconsistent")

    def decode_pins(self, pins: Pins) -> int | None:
        """Return the id of the first target, in pin-set order, sharing a pin with ``pins``."""
        for candidate, index in sorted(self.target_id.items(), key=lambda item: tuple(item[0])):
            if candidate.intersect(pins):
                return index
        return None

    def nb_transport_fw(
        self, initiator_id: int, trans: Payload, phase: Phase, delay: Delay
    ) -> tuple[SyncStatus, Phase, Delay]:
        vid = self.decode_pins(trans.pins)
        trans.route.init = initiator_id
        trans.route.targ = -1 if vid is None else vid
        if vid is None:
            self.sim.reporter.warning(self.name, f"No such target with pins({trans.pins.to_string()}) found!")
            return SyncStatus.COMPLETED, phase, delay
        return self._targets[vid].nb_transport_fw(trans, phase, delay)

    def nb_transport_bw(
        self, target_id: int, trans: Payload, phase: Phase, delay: Delay
    ) -> tuple[SyncStatus, Phase, Delay]:
        if target_id != trans.route.targ:
            raise RuntimeError(
                f"backward call from target {target_id} for a transaction routed to {trans.route.targ}"
            )
        return self._initiators[trans.route.init].nb_transport_bw(trans, phase, delay)