"""Receiver side of a UART link: samples the line and decodes bytes."""

from __future__ import annotations

from fractions import Fraction

from .sim import Logic, Process, ResolvedSignal, Simulator, Verbosity
from .target import _Port
from .uart_config import UartInterfaceConfig


def _baud_period(baud_rate: int) -> int:
    """Length of one bit at ``baud_rate``, in picoseconds."""
    if baud_rate <= 0:
        raise ValueError(f"baud rate must be positive, not {baud_rate}")
    return round(Fraction(10**12, baud_rate))


class UartHardware:
    """Samples ``rxd`` at the centre of each bit and echoes every data bit on ``txd``."""

    def __init__(self, sim: Simulator, name: str, interface_config: UartInterfaceConfig) -> None:
        self.sim = sim
        self.name = name
        self.interface_config = interface_config
        self.baud_period = _baud_period(interface_config.baud_rate)
        self.rxd = _Port(f"{name}.rxd")
        self.txd = _Port(f"{name}.txd")
        self.trace_clk = ResolvedSignal(sim, f"{name}.trace_clk")
        self.received = bytearray()
        sim.spawn(self._run())

    def _toggle_clock(self) -> None:
        level = Logic.X if self.trace_clk.read() is Logic.Z else Logic.Z
        self.trace_clk.write(self, level)

    def _run(self) -> Process:
        report = self.sim.reporter
        self.txd.write(Logic.ONE)
        self.trace_clk.write(self, Logic.ONE)
        yield 0
        report.info(Verbosity.DEBUG, self.name, "pin initialized")

        bit_count = max(int(self.interface_config.data_bits), 8)
        half_and_one = round(Fraction(3, 2) * self.baud_period)
        while True:
            while self.rxd.read() is Logic.ONE:
                yield self.rxd.value_changed_event

            next_sample = self.sim.now + half_and_one
            self.trace_clk.write(self, Logic.ZERO)
            yield next_sample - self.sim.now

            value = 0
            for bit in range(bit_count):
                high = self.rxd.read() is Logic.ONE
                value |= int(high) << bit
                self.txd.write(Logic.ONE if high else Logic.ZERO)
                self._toggle_clock()
                next_sample += self.baud_period
                yield next_sample - self.sim.now

            if self.rxd.read() is not Logic.ONE:
                report.warning("UART", "framing error: stop bit not found!")
            self.trace_clk.write(self, Logic.ONE)

            byte = value & 0xFF
            self.received.append(byte)
            report.info(Verbosity.FULL, self.name, f"UART read 0x{byte:x}, ascii: {chr(byte)}")