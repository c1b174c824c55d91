import io
import json

import pytest

import vpcb.uart_config  # noqa: F401  registers the UART data-pack type
from vpcb.initiator import PcbInitiator
from vpcb.interconnect import PcbInterconnect
from vpcb.sim import Phase, ReportError, Reporter, Simulator, SyncStatus, parse_time
from vpcb.target import PcbTarget


class Recorder(PcbTarget):
    def __init__(self, sim, name, pin_config):
        super().__init__(sim, name, pin_config)
        self.calls = []

    def hw_access(self, trans, phase):
        self.calls.append(trans)
        self.hw_access_done(trans)


def data_pack(pins=("PA9", "PA10")):
    return json.dumps(
        {
            "pins": list(pins),
            "type": "UART",
            "Interface Configuration": {
                "Pin Configuration": {"PA9": "TX", "PA10": "RX"},
                "Baud Rate": 9600,
                "Data Bits": 8,
                "Parity Bit": 0,
                "Stop Bits": 1,
            },
            "Data": {"TX": [104, 105], "RX": []},
        }
    )


@pytest.fixture
def sim():
    return Simulator(reporter=Reporter(stream=io.StringIO()))


def build(sim, datapack=None):
    board = PcbInterconnect(sim, "pcb")
    initiator = PcbInitiator(sim, "initiator", datapack=datapack)
    initiator.bind(board)
    target = Recorder(sim, "uart", {"PA9": "TX", "PA10": "RX"})
    board.bind_target(target)
    return initiator, target


def test_full_handshake_ends_simulation(sim):
    initiator, target = build(sim)
    trans = initiator.trans_to_slave(data_pack())
    sim.run()
    assert target.calls == [trans]
    assert trans.data.tx == b"hi"
    assert sim.stopped
    assert sim.now == parse_time("125 us")
    assert initiator.trans_keeper == [trans]


def test_main_thread_sends_datapack_file(sim, tmp_path):
    path = tmp_path / "datapack.json"
    path.write_text(data_pack(), encoding="utf-8")
    initiator, target = build(sim, datapack=path)
    sim.run()
    assert len(target.calls) == 1
    assert sim.now == parse_time("10 us") + parse_time("125 us")


def test_missing_datapack_file(sim, tmp_path):
    build(sim, datapack=tmp_path / "absent.json")
    with pytest.raises(FileNotFoundError):
        sim.run()


def test_unbound_initiator_reports_error(sim):
    initiator = PcbInitiator(sim, "initiator", datapack=None)
    with pytest.raises(ReportError):
        initiator.trans_to_slave(data_pack())


def test_unknown_pins_give_warning(sim):
    initiator, target = build(sim)
    trans = initiator.trans_to_slave(data_pack(pins=["PZ0"]))
    sim.run()
    assert target.calls == []
    assert trans.route.targ == -1
    assert any("illegal return status" in m for m in sim.reporter.messages)
    assert not sim.stopped


def test_backward_call_is_accepted_and_queued(sim):
    initiator, target = build(sim)
    trans = initiator.trans_to_slave(data_pack())
    result = initiator.nb_transport_bw(trans, Phase.BEGIN_RESP, 0)
    assert result == (SyncStatus.ACCEPTED, Phase.BEGIN_RESP, 0)


def test_bad_data_pack_is_rejected(sim):
    initiator, _ = build(sim)
    with pytest.raises(json.JSONDecodeError):
        initiator.trans_to_slave("not json")
    assert initiator.trans_keeper == []