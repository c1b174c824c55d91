"""UART device on the board: turns data packs into line waveforms."""

from __future__ import annotations

import json
from collections import deque

from .payload import Payload
from .pins import PinConfig
from .sim import Event, Logic, Phase, Process, ResolvedSignal, Simulator, VcdTrace, Verbosity
from .target import PcbTarget
from .uart_config import ParityBit, UartData, UartInterfaceConfig
from .uart_hardware import UartHardware, _baud_period


def uart_frame(datum: int, interface_config: UartInterfaceConfig) -> list[Logic]:
    """Line levels of one frame, one per baud period, from start bit through stop bits."""
    if not 0 <= datum <= 0xFF:
        raise ValueError(f"datum must be a byte, not {datum}")
    data_bits = int(interface_config.data_bits)
    levels = [Logic.ZERO]
    levels += [Logic.ONE if datum >> bit & 1 else Logic.ZERO for bit in range(max(data_bits, 8))]
    parity = interface_config.parity_bit
    if parity != ParityBit.NONE:
        odd = bin(datum).count("1") % 2 == 1
        if parity == ParityBit.ODD:
            levels.append(Logic.ZERO if odd else Logic.ONE)
        else:
            levels.append(Logic.ONE if odd else Logic.ZERO)
    elif data_bits == 9:
        levels.append(levels[-1])
    levels += [Logic.ONE] * int(interface_config.stop_bits)
    return levels


class UartDriver(PcbTarget):
    """Transmits the TX bytes of each UART data pack on its TX pin, bit by bit."""

    def __init__(
        self,
        sim: Simulator,
        name: str,
        pin_config: PinConfig | dict[str, str],
        interface_config: UartInterfaceConfig,
        trace: VcdTrace | None = None,
    ) -> None:
        super().__init__(sim, name, pin_config)
        report = sim.reporter
        tx_pin = self.pin_config.func_to_pin("TX")
        rx_pin = self.pin_config.func_to_pin("RX")
        if tx_pin not in self.pin_value:
            report.error("UART_Driver", "pin_value for TX not found!")
        if rx_pin not in self.pin_value:
            report.error("UART_Driver", "pin_value for RX not found!")
        self.txd = self.pin_value[tx_pin]
        self.rxd = self.pin_value[rx_pin]
        report.info(Verbosity.DEBUG, name, f"bind trace {tx_pin} to my tx")
        report.info(Verbosity.DEBUG, name, f"bind trace {rx_pin} to my rx")

        self.trace = trace
        self.trace_clk = ResolvedSignal(sim, f"{name}.trace_clk")
        self.hardware = UartHardware(sim, f"{name}.hardware", interface_config)
        self.hardware.rxd.bind(self.txd)
        self.hardware.txd.bind(self.rxd)
        report.info(Verbosity.DEBUG, name, f"bind trace {tx_pin} to hardware rx")
        report.info(Verbosity.DEBUG, name, f"bind trace {rx_pin} to hardware tx")

        self._pending: deque[Payload] = deque()
        self._arrival = Event(sim, f"{name}.uart_peq")
        sim.spawn(self._run())

    def hw_access(self, trans: Payload, phase: Phase) -> None:
        self._pending.append(trans)
        self._arrival.notify(0)

    def _toggle_clock(self) -> None:
        level = Logic.X if self.trace_clk.read() is Logic.Z else Logic.Z
        self.trace_clk.write(self, level)

    def _register_traces(self) -> None:
        if self.trace is None:
            return
        self.trace.add(self.rxd.signal, f"{self.name}.RX")
        self.trace.add(self.txd.signal, f"{self.name}.TX")
        self.trace.add(self.trace_clk, f"{self.name}.trace_clk")
        self.trace.add(self.hardware.trace_clk, f"{self.name}.hw_trace_clk")

    def _run(self) -> Process:
        report = self.sim.reporter
        self._register_traces()
        self.rxd.write(Logic.Z)
        self.txd.write(Logic.ONE)
        self.trace_clk.write(self, Logic.ONE)
        yield 0
        report.info(Verbosity.DEBUG, self.name, "pin initialized")

        while True:
            while not self._pending:
                yield self._arrival
            trans = self._pending.popleft()
            ic = trans.interface_config
            data = trans.data
            if not isinstance(ic, UartInterfaceConfig) or not isinstance(data, UartData):
                report.error(self.name, "transaction does not carry a UART data pack")
            report.info(
                Verbosity.DEBUG,
                self.name,
                "Received transation data: \nInterface Config: "
                f"{json.dumps(ic.to_json())}\nData: {json.dumps(data.to_json())}",
            )

            tx_pin = self.pin_config.func_to_pin("TX")
            rx_pin = self.pin_config.func_to_pin("RX")
            if ic.pin_config.get(tx_pin) != "TX" or ic.pin_config.get(rx_pin) != "RX":
                report.warning(self.name, "TX and RX pin misconfigured!")
                self.hw_access_done(trans)
                continue

            period = _baud_period(ic.baud_rate)
            data_count = max(int(ic.data_bits), 8)
            for datum in data.tx:
                frame = uart_frame(datum, ic)
                stop_from = len(frame) - int(ic.stop_bits)
                next_sample = self.sim.now
                for index, level in enumerate(frame):
                    self.txd.write(level)
                    if index == 0:
                        self.trace_clk.write(self, Logic.ZERO)
                    elif index <= data_count:
                        self._toggle_clock()
                    elif index >= stop_from:
                        self.trace_clk.write(self, Logic.ONE)
                    next_sample += period
                    yield next_sample - self.sim.now

            self.hw_access_done(trans)