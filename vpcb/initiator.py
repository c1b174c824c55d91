"""The device that sends data packs onto the virtual board."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Callable

from .interconnect import PcbInterconnect
from .payload import Payload
from .sim import (
    Delay,
    Phase,
    PayloadEventQueue,
    Process,
    Simulator,
    SyncStatus,
    Verbosity,
    format_time,
    parse_time,
)


def _describe_delay(delay: Delay) -> str:
    return format_time(parse_time(delay) if isinstance(delay, str) else delay)


class PcbInitiator:
    """Sends transactions built from JSON data packs and completes their handshakes."""

    def __init__(
        self, sim: Simulator, name: str, datapack: str | Path | None = "datapack.json"
    ) -> None:
        self.sim = sim
        self.name = name
        self.datapack = None if datapack is None else Path(datapack)
        self.trans_keeper: list[Payload] = []
        self.peq = PayloadEventQueue(sim, self._peq_cb)
        self._forward: Callable[[Payload, Phase, Delay], tuple[SyncStatus, Phase, Delay]] | None = None
        if self.datapack is not None:
            sim.spawn(self._main_thread())

    def bind(self, interconnect: PcbInterconnect) -> None:
        index = interconnect.bind_initiator(self)
        self._forward = partial(interconnect.nb_transport_fw, index)

    def nb_transport_bw(self, trans: Payload, phase: Phase, delay: Delay) -> tuple[SyncStatus, Phase, Delay]:
        report = self.sim.reporter
        report.info(Verbosity.DEBUG, self.name, str(phase))
        report.info(Verbosity.DEBUG, self.name, f"putting trans into peq with delay: {_describe_delay(delay)}")
        self.peq.notify(trans, phase, delay)
        return SyncStatus.ACCEPTED, phase, delay

    def _peq_cb(self, trans: Payload, phase: Phase) -> None:
        if phase is Phase.BEGIN_RESP and self._forward is not None:
            self._forward(trans, Phase.END_RESP, "125 us")

    def _main_thread(self) -> Process:
        text = self.datapack.read_text(encoding="utf-8")
        yield "10 us"
        self.sim.reporter.info(Verbosity.DEBUG, self.name, f"Send data packet: {text}")
        self.trans_to_slave(text)

    def trans_to_slave(self, json_str: str) -> Payload:
        """Send one data pack as a non-blocking transaction and return it."""
        if self._forward is None:
            self.sim.reporter.error(self.name, "socket is not bound")
        trans = Payload.from_json(json_str)
        self.trans_keeper.append(trans)
        status, phase, _ = self._forward(trans, Phase.BEGIN_REQ, 0)
        self.sim.reporter.info(Verbosity.DEBUG, self.name, str(phase))
        if status is SyncStatus.UPDATED and phase is Phase.END_REQ:
            pass
        elif status is not SyncStatus.ACCEPTED:
            self.sim.reporter.warning(self.name, "illegal return status")
        return trans