"""Transaction payloads carried across the virtual board."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .factory import produce_data, produce_interface_config
from .pins import PinConfig, Pins
from .sim import parse_time


@dataclass
class InterfaceConfig:
    """Base for the interface-configuration section of a payload."""

    pin_config: PinConfig = field(default_factory=PinConfig)


class PayloadData:
    """Base for the data section of a payload."""


@dataclass
class Route:
    """Socket indices a transaction travelled through in the interconnect."""

    init: int = -1
    targ: int = -1


def _optional_time(doc: dict[str, Any], key: str) -> int | None:
    if key not in doc:
        return None
    value = doc[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a time string")
    return parse_time(value)


@dataclass(eq=False)
class Payload:
    """One transaction: target pins, optional timing, and type-specific sections."""

    pins: Pins = field(default_factory=Pins)
    type_name: str = ""
    begin_time: int | None = None
    end_time: int | None = None
    interface_config: InterfaceConfig | None = None
    data: PayloadData | None = None
    route: Route = field(default_factory=Route)

    @classmethod
    def from_json(cls, text: str) -> Payload:
        """Build a payload from a JSON data pack, using the registered type factories."""
        doc = json.loads(text)
        if not isinstance(doc, dict):
            raise TypeError("data pack must be a JSON object")
        pins = Pins.from_json(doc["pins"])
        begin_time = _optional_time(doc, "beginTime")
        end_time = _optional_time(doc, "endTime")
        type_name = doc["type"]
        if not isinstance(type_name, str):
            raise TypeError("type must be a string")
        return cls(
            pins=pins,
            type_name=type_name,
            begin_time=begin_time,
            end_time=end_time,
            interface_config=produce_interface_config(type_name, doc["Interface Configuration"]),
            data=produce_data(type_name, doc["Data"]),
        )