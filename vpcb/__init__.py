"""Discrete-event virtual PCB simulator with pin-routed UART peripheral models."""

__version__ = "0.1.0"