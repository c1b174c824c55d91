"""UART data-pack sections: interface configuration and transmitted bytes."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .factory import register_type_factory
from .payload import InterfaceConfig, PayloadData
from .pins import PinConfig


class DataBits(enum.IntEnum):
    """Number of data bits in a UART frame."""

    EIGHT = 8
    NINE = 9


class ParityBit(enum.IntEnum):
    """Parity mode of a UART frame."""

    NONE = 0
    ODD = 1
    EVEN = 2


class StopBits(enum.IntEnum):
    """Number of stop bits in a UART frame."""

    ONE = 1
    TWO = 2


def _int_field(data: Mapping[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key} must be an integer, not {value!r}")
    return value


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be an object, not {type(data).__name__}")
    return data


@dataclass
class UartInterfaceConfig(InterfaceConfig):
    """Line settings of a UART link together with its pin configuration."""

    baud_rate: int = 9600
    data_bits: DataBits = DataBits.EIGHT
    parity_bit: ParityBit = ParityBit.NONE
    stop_bits: StopBits = StopBits.ONE

    @classmethod
    def from_json(cls, data: Any) -> UartInterfaceConfig:
        """Build the configuration from its decoded JSON object."""
        doc = _require_mapping(data, "UART interface configuration")
        return cls(
            pin_config=PinConfig.from_json(doc["Pin Configuration"]),
            baud_rate=_int_field(doc, "Baud Rate"),
            data_bits=DataBits(_int_field(doc, "Data Bits")),
            parity_bit=ParityBit(_int_field(doc, "Parity Bit")),
            stop_bits=StopBits(_int_field(doc, "Stop Bits")),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "Pin Configuration": self.pin_config.to_json(),
            "Baud Rate": self.baud_rate,
            "Data Bits": int(self.data_bits),
            "Parity Bit": int(self.parity_bit),
            "Stop Bits": int(self.stop_bits),
        }


def _byte_field(doc: Mapping[str, Any], key: str) -> bytes:
    value = doc[key]
    if not isinstance(value, list):
        raise TypeError(f"{key} must be a list of bytes")
    return bytes(value)


@dataclass
class UartData(PayloadData):
    """Bytes to transmit and bytes received on a UART link."""

    tx: bytes = b""
    rx: bytes = b""

    @classmethod
    def from_json(cls, data: Any) -> UartData:
        """Build the data section from its decoded JSON object."""
        doc = _require_mapping(data, "UART data")
        return cls(tx=_byte_field(doc, "TX"), rx=_byte_field(doc, "RX"))

    def to_json(self) -> dict[str, list[int]]:
        return {"TX": list(self.tx), "RX": list(self.rx)}


register_type_factory("UART", UartData.from_json, UartInterfaceConfig.from_json)