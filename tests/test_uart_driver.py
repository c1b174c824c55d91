import io
import json

import pytest

from vpcb.initiator import PcbInitiator
from vpcb.interconnect import PcbInterconnect
from vpcb.payload import Payload
from vpcb.pins import PinConfig, Pins
from vpcb.sim import Logic, Phase, ReportError, Reporter, ResolvedSignal, Simulator, SyncStatus, Verbosity
from vpcb.uart_config import DataBits, ParityBit, StopBits, UartData, UartInterfaceConfig
from vpcb.uart_driver import UartDriver, uart_frame

BAUD = 1_000_000
PINS = {"T1": "TX", "T2": "RX"}


def _sim():
    return Simulator(Reporter(level=Verbosity.DEBUG, stream=io.StringIO()))


def _config(pin_config=PINS, **kwargs):
    return UartInterfaceConfig(pin_config=PinConfig(pin_config), baud_rate=BAUD, **kwargs)


def _bound_driver(sim):
    driver = UartDriver(sim, "uart", PINS, _config())
    tx_line = ResolvedSignal(sim, "T1")
    rx_line = ResolvedSignal(sim, "T2")
    driver.pin_value["T1"].bind(tx_line)
    driver.pin_value["T2"].bind(rx_line)
    return driver, tx_line


def test_frame_8n1():
    frame = uart_frame(0x41, _config())
    assert frame == [
        Logic.ZERO,
        Logic.ONE, Logic.ZERO, Logic.ZERO, Logic.ZERO,
        Logic.ZERO, Logic.ZERO, Logic.ONE, Logic.ZERO,
        Logic.ONE,
    ]


@pytest.mark.parametrize("datum", [0x00, 0x5A, 0xA5, 0xFF])
@pytest.mark.parametrize("stop_bits", [StopBits.ONE, StopBits.TWO])
def test_frame_structure(datum, stop_bits):
    frame = uart_frame(datum, _config(stop_bits=stop_bits))
    assert frame[0] is Logic.ZERO
    assert frame[-int(stop_bits):] == [Logic.ONE] * int(stop_bits)
    decoded = sum(int(level is Logic.ONE) << i for i, level in enumerate(frame[1:9]))
    assert decoded == datum


@pytest.mark.parametrize("datum", range(0, 256, 17))
def test_parity_bits(datum):
    odd = uart_frame(datum, _config(parity_bit=ParityBit.ODD))
    even = uart_frame(datum, _config(parity_bit=ParityBit.EVEN))
    assert [lvl for lvl in odd[1:10] if lvl is Logic.ONE].__len__() % 2 == 1
    assert [lvl for lvl in even[1:10] if lvl is Logic.ONE].__len__() % 2 == 0


def test_nine_bits_without_parity_hold_line():
    frame = uart_frame(0xFF, _config(data_bits=DataBits.NINE))
    assert frame[9] is Logic.ZERO
    assert frame[10] is frame[9]
    assert frame[-1] is Logic.ONE


def test_frame_rejects_non_byte():
    with pytest.raises(ValueError):
        uart_frame(256, _config())


def test_missing_rx_pin_is_an_error():
    with pytest.raises(ReportError, match="RX not found"):
        UartDriver(_sim(), "uart", {"T1": "TX"}, _config())


def test_hw_access_transmits_and_answers():
    sim = _sim()
    driver, tx_line = _bound_driver(sim)
    calls = []

    def backward(trans, phase, delay):
        calls.append((trans, phase))
        return SyncStatus.ACCEPTED, phase, delay

    driver.backward = backward
    trans = Payload(pins=Pins(PINS), type_name="UART", interface_config=_config(), data=UartData(tx=b"ok"))
    driver.hw_access(trans, Phase.BEGIN_REQ)
    sim.run()
    assert bytes(driver.hardware.received) == b"ok"
    assert calls == [(trans, Phase.BEGIN_RESP)]
    assert tx_line.read() is Logic.ONE


def test_misconfigured_pins_skip_transmission():
    sim = _sim()
    driver, _ = _bound_driver(sim)
    calls = []
    driver.backward = lambda trans, phase, delay: calls.append(phase) or (SyncStatus.ACCEPTED, phase, delay)
    ic = _config(pin_config={"T1": "RX", "T2": "TX"})
    trans = Payload(pins=Pins(PINS), type_name="UART", interface_config=ic, data=UartData(tx=b"x"))
    driver.hw_access(trans, Phase.BEGIN_REQ)
    sim.run()
    assert driver.hardware.received == bytearray()
    assert calls == [Phase.BEGIN_RESP]
    assert any("TX and RX pin misconfigured!" in m for m in sim.reporter.messages)


def test_full_handshake_through_board():
    sim = _sim()
    board = PcbInterconnect(sim, "board")
    initiator = PcbInitiator(sim, "init", datapack=None)
    initiator.bind(board)
    driver = UartDriver(sim, "uart", PINS, _config())
    board.bind_target(driver)
    pack = {
        "pins": ["T1", "T2"],
        "type": "UART",
        "Interface Configuration": _config().to_json(),
        "Data": {"TX": list(b"hello"), "RX": []},
    }
    initiator.trans_to_slave(json.dumps(pack))
    sim.run()
    assert bytes(driver.hardware.received) == b"hello"
    assert sim.stopped
    assert board.trace_value["T1"].read() is Logic.ONE