"""Registry of factories that build payload sections for each data-pack type."""

from __future__ import annotations

from typing import Any, Callable

DataFactory = Callable[[Any], Any]
InterfaceConfigFactory = Callable[[Any], Any]

_data_factories: dict[str, DataFactory] = {}
_interface_config_factories: dict[str, InterfaceConfigFactory] = {}


def register_type_factory(
    type_name: str,
    data_factory: DataFactory,
    interface_config_factory: InterfaceConfigFactory,
) -> None:
    """Register the two factories for a data-pack type; a type registers only once."""
    if type_name in _data_factories or type_name in _interface_config_factories:
        raise ValueError(f"Fatal error: Factory function for type: {type_name} already exists!")
    _data_factories[type_name] = data_factory
    _interface_config_factories[type_name] = interface_config_factory


def produce_data(type_name: str, obj: Any) -> Any:
    """Build the data section of a ``type_name`` payload from decoded JSON."""
    try:
        factory = _data_factories[type_name]
    except KeyError:
        raise KeyError(f"Factory function for type: {type_name} does not exist!") from None
    return factory(obj)


def produce_interface_config(type_name: str, obj: Any) -> Any:
    """Build the interface configuration of a ``type_name`` payload from decoded JSON."""
    try:
        factory = _interface_config_factories[type_name]
    except KeyError:
        raise KeyError(f"Factory function for type: {type_name} does not exist!") from None
    return factory(obj)