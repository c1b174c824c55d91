import json

import pytest

from vpcb.factory import produce_data, produce_interface_config, register_type_factory
from vpcb.payload import Payload
from vpcb.uart_config import (
    DataBits,
    ParityBit,
    StopBits,
    UartData,
    UartInterfaceConfig,
)

CONFIG_DOC = {
    "Pin Configuration": {"PB2": "TX", "PB3": "RX"},
    "Baud Rate": 9600,
    "Data Bits": 8,
    "Parity Bit": 0,
    "Stop Bits": 1,
}

DATA_DOC = {
    "TX": [104, 101, 108, 108, 111, 44, 32, 119, 111, 114, 108, 100],
    "RX": [],
}


def test_config_from_json_reads_every_field():
    config = UartInterfaceConfig.from_json(CONFIG_DOC)
    assert config.baud_rate == 9600
    assert config.data_bits is DataBits.EIGHT
    assert config.parity_bit is ParityBit.NONE
    assert config.stop_bits is StopBits.ONE
    assert config.pin_config.func_to_pin("TX") == "PB2"
    assert config.pin_config.func_to_pin("RX") == "PB3"


def test_config_round_trip():
    config = UartInterfaceConfig.from_json(CONFIG_DOC)
    assert config.to_json() == CONFIG_DOC
    assert UartInterfaceConfig.from_json(config.to_json()) == config


@pytest.mark.parametrize(
    "key, value, attr",
    [
        ("Data Bits", 8, "data_bits"),
        ("Data Bits", 9, "data_bits"),
        ("Parity Bit", 0, "parity_bit"),
        ("Parity Bit", 1, "parity_bit"),
        ("Parity Bit", 2, "parity_bit"),
        ("Stop Bits", 1, "stop_bits"),
        ("Stop Bits", 2, "stop_bits"),
    ],
)
def test_enum_values_follow_the_format(key, value, attr):
    config = UartInterfaceConfig.from_json(dict(CONFIG_DOC, **{key: value}))
    assert int(getattr(config, attr)) == value
    assert config.to_json()[key] == value


@pytest.mark.parametrize("key, value", [("Data Bits", 7), ("Parity Bit", 3), ("Stop Bits", 0)])
def test_config_rejects_unknown_enum_values(key, value):
    doc = dict(CONFIG_DOC, **{key: value})
    with pytest.raises(ValueError):
        UartInterfaceConfig.from_json(doc)


def test_config_rejects_non_integer_baud_rate():
    with pytest.raises(TypeError):
        UartInterfaceConfig.from_json(dict(CONFIG_DOC, **{"Baud Rate": "fast"}))


def test_config_missing_key():
    doc = {k: v for k, v in CONFIG_DOC.items() if k != "Stop Bits"}
    with pytest.raises(KeyError):
        UartInterfaceConfig.from_json(doc)


def test_data_from_json_and_back():
    data = UartData.from_json(DATA_DOC)
    assert data.tx == b"hello, world"
    assert data.rx == b""
    assert data.to_json() == DATA_DOC


def test_data_rejects_out_of_range_byte():
    with pytest.raises(ValueError):
        UartData.from_json({"TX": [256], "RX": []})


def test_data_rejects_non_list():
    with pytest.raises(TypeError):
        UartData.from_json({"TX": "hello", "RX": []})


def test_uart_type_is_registered():
    assert produce_interface_config("UART", CONFIG_DOC) == UartInterfaceConfig.from_json(CONFIG_DOC)
    assert produce_data("UART", DATA_DOC) == UartData.from_json(DATA_DOC)


def test_uart_type_cannot_register_twice():
    with pytest.raises(ValueError):
        register_type_factory("UART", UartData.from_json, UartInterfaceConfig.from_json)


def test_payload_built_from_uart_data_pack():
    text = json.dumps(
        {
            "pins": ["PB2", "PB3"],
            "beginTime": "10ns",
            "type": "UART",
            "Interface Configuration": CONFIG_DOC,
            "Data": DATA_DOC,
        }
    )
    payload = Payload.from_json(text)
    assert payload.interface_config == UartInterfaceConfig.from_json(CONFIG_DOC)
    assert payload.data.tx == b"hello, world"