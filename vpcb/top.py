"""The top level: builds the board from a netlist and runs the simulation."""

from __future__ import annotations

import argparse
import json
import signal
from pathlib import Path
from typing import Any

from .initiator import PcbInitiator
from .interconnect import PcbInterconnect
from .pins import PinConfig
from .sim import Reporter, Simulator, VcdTrace, Verbosity
from .target import PcbTarget
from .uart_config import UartInterfaceConfig
from .uart_driver import UartDriver


class Top:
    """An initiator, the board interconnect, and the devices named in a netlist."""

    def __init__(
        self,
        name: str = "hw_top",
        trace_file: str | Path = "wave",
        netlist: str | Path = "netlist.json",
        datapack: str | Path | None = "datapack.json",
        sim: Simulator | None = None,
    ) -> None:
        self.name = name
        self.sim = sim if sim is not None else Simulator()
        self.trace = VcdTrace(trace_file)
        self.initiator = PcbInitiator(self.sim, "initiator", datapack)
        self.virt_pcb = PcbInterconnect(self.sim, "virt_pcb", self.trace)
        self.targets: list[PcbTarget] = []

        self.read_net_list(netlist)

        self.initiator.bind(self.virt_pcb)
        for target in self.targets:
            self.virt_pcb.bind_target(target)

    def read_net_list(self, path: str | Path = "netlist.json") -> None:
        """Create a device for every supported component in the netlist file."""
        doc: Any = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(doc, dict):
            raise TypeError("netlist must be a JSON object")
        for device, obj in doc.items():
            pin_to_trace: dict[str, str] = dict(obj["pin_to_trace"])
            for comp in obj["components"]:
                if comp["type"] != "UART":
                    continue
                hw_ic = UartInterfaceConfig.from_json(comp["Interface Configuration"])
                pin_config = PinConfig()
                for pin_num, func in hw_ic.pin_config.items():
                    if pin_num not in pin_to_trace:
                        self.sim.reporter.warning(
                            self.name, f"{device}: pin {pin_num} not found in pin_to_trace"
                        )
                    pin_config.setdefault(pin_to_trace.get(pin_num, ""), func)
                self.targets.append(UartDriver(self.sim, device, pin_config, hw_ic, self.trace))

    def end_of_simulation(self) -> None:
        self.trace.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="vpcb", description="Simulate a virtual board from a netlist and a data pack."
    )
    parser.add_argument("--netlist", default="netlist.json", help="board netlist (JSON)")
    parser.add_argument("--datapack", default="datapack.json", help="data pack to send (JSON)")
    parser.add_argument("--trace", default="wave", help="waveform file name, without .vcd")
    parser.add_argument("--log", default="report.log", help="report log file")
    args = parser.parse_args(argv)

    sim = Simulator()
    sim.reporter = Reporter(level=Verbosity.DEBUG, log_path=args.log, clock=lambda: sim.now)

    def on_interrupt(signum: int, frame: object) -> None:
        print("Interrupted")
        sim.stop()

    previous = signal.signal(signal.SIGINT, on_interrupt)
    try:
        top = Top("hw_top", args.trace, args.netlist, args.datapack, sim=sim)
        print("Start Simulating.......")
        sim.run()
        top.end_of_simulation()
    finally:
        signal.signal(signal.SIGINT, previous)
    return 0