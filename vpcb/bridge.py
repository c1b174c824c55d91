"""Polls a socket connection to an external emulator from inside the simulation."""

from __future__ import annotations

import sys
from typing import TextIO

from .sim import Delay, Process, Simulator
from .socket_api import Client, recv_data_nowait


class Bridge:
    """Connects to a server and reports the data it sends, once per clock cycle."""

    buf_size = 100_000

    def __init__(
        self,
        sim: Simulator,
        name: str,
        is_unix: bool,
        path_or_ip: str,
        port: int = 0,
        *,
        clock_period: Delay = "250 ns",
        connect_seconds: int = 60,
        retry_interval: float = 1.0,
        stream: TextIO | None = None,
    ) -> None:
        self.sim = sim
        self.name = name
        self.clock_period = clock_period
        self.connect_seconds = connect_seconds
        self.stream = stream
        self.received: list[bytes] = []
        self.client = Client(is_unix, path_or_ip, port, retry_interval=retry_interval)
        self.client.create_socket()
        sim.spawn(self.run())

    def _print(self, text: str) -> None:
        print(text, file=self.stream if self.stream is not None else sys.stdout)

    def run(self) -> Process:
        """Connect, then poll for data on every clock cycle until the server closes."""
        self._print(
            f'Waiting server(QEMU) connection on path "{self.client.path_or_ip}" '
            f"for {self.connect_seconds} secs"
        )
        try:
            self.client.connect_timeout(self.connect_seconds)
        except (ConnectionError, ValueError):
            self._print("Failed to connect to server, closing...")
            raise
        self._print("Server(QEMU) connected")

        while self.client.sock is not None:
            try:
                data = recv_data_nowait(self.client.sock, self.buf_size)
            except OSError:
                self._print("Server closed")
                self.sim.stop()
                return
            if data:
                self.received.append(data)
                self._print(f'Data received: "{data.decode("utf-8", "replace")}"')
            yield self.clock_period
        self.sim.stop()

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> Bridge:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()