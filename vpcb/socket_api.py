"""Stream sockets over UNIX paths or TCP addresses, for servers and clients."""

from __future__ import annotations

import itertools
import os
import socket
import time
from dataclasses import dataclass, field


def _family(is_unix: bool) -> int:
    if is_unix:
        return socket.AF_UNIX
    return socket.AF_INET


def _tcp_address(ip: str, port: int) -> tuple[str, int]:
    try:
        socket.inet_pton(socket.AF_INET, ip)
    except OSError:
        raise ValueError(f"invalid IPv4 address: {ip!r}") from None
    return ip, port


@dataclass
class Server:
    """A listening socket that accepts a single client."""

    is_unix: bool
    path_or_ip: str
    port: int = 0
    client_sock: socket.socket | None = field(default=None, repr=False)
    server_sock: socket.socket | None = field(default=None, repr=False)

    def create_socket(self) -> socket.socket:
        """Create the listening socket."""
        self.server_sock = socket.socket(_family(self.is_unix), socket.SOCK_STREAM)
        return self.server_sock

    def _address(self) -> str | tuple[str, int]:
        if self.is_unix:
            return self.path_or_ip
        if self.path_or_ip == "0.0.0.0":
            return "", self.port
        return _tcp_address(self.path_or_ip, self.port)

    def bind_listen(self) -> socket.socket:
        """Bind to the path or address, listen, and wait for one client."""
        if self.server_sock is None:
            raise RuntimeError("socket not created")
        address = self._address()
        if self.is_unix:
            try:
                os.unlink(self.path_or_ip)
            except FileNotFoundError:
                pass
        self.server_sock.bind(address)
        self.server_sock.listen(5)
        self.client_sock, _ = self.server_sock.accept()
        return self.client_sock

    def close(self) -> None:
        """Close the client connection and the listening socket."""
        if self.client_sock is not None:
            self.client_sock.close()
            self.client_sock = None
        if self.server_sock is not None:
            if self.is_unix:
                try:
                    os.unlink(self.path_or_ip)
                except FileNotFoundError:
                    pass
            self.server_sock.close()
            self.server_sock = None

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


@dataclass
class Client:
    """A socket that connects to a server by UNIX path or TCP address."""

    is_unix: bool
    path_or_ip: str
    port: int = 0
    retry_interval: float = 1.0
    sock: socket.socket | None = field(default=None, repr=False)

    def create_socket(self) -> socket.socket:
        """Create the client socket."""
        self.sock = socket.socket(_family(self.is_unix), socket.SOCK_STREAM)
        return self.sock

    def _address(self) -> str | tuple[str, int]:
        if self.is_unix:
            return self.path_or_ip
        try:
            return _tcp_address(self.path_or_ip, self.port)
        except ValueError:
            self.close()
            raise

    def connect(self) -> None:
        """Connect once; the socket is closed and the error raised on failure."""
        if self.sock is None:
            raise RuntimeError("socket not created")
        address = self._address()
        try:
            self.sock.connect(address)
        except OSError:
            self.close()
            raise

    def connect_timeout(self, seconds: int) -> None:
        """Retry connecting every ``retry_interval`` for ``seconds`` retries.

        Raises ConnectionError when every attempt failed.
        """
        if self.sock is None:
            raise RuntimeError("socket not created")
        address = self._address()
        for attempt in itertools.count():
            try:
                self.sock.connect(address)
                return
            except OSError as exc:
                if attempt >= seconds:
                    raise ConnectionError(
                        f"cannot connect to {self.path_or_ip!r} after {seconds} retries"
                    ) from exc
            time.sleep(self.retry_interval)
            self.sock.close()
            self.create_socket()

    def close(self) -> None:
        if self.sock is not None:
            self.sock.close()
            self.sock = None

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def send_data(sock: socket.socket, data: bytes) -> int:
    """Send ``data`` and return the number of bytes sent."""
    return sock.send(data)


def recv_data(sock: socket.socket, size: int) -> bytes:
    """Receive up to ``size`` bytes, blocking; empty when the peer has closed."""
    return sock.recv(size)


def recv_data_nowait(sock: socket.socket, size: int) -> bytes:
    """Receive up to ``size`` bytes without blocking.

    Returns empty bytes when nothing is available and raises ConnectionError
    when the peer has closed the connection.
    """
    previous = sock.gettimeout()
    sock.setblocking(False)
    try:
        data = sock.recv(size)
    except BlockingIOError:
        return b""
    finally:
        sock.settimeout(previous)
    if not data:
        raise ConnectionError("peer closed the connection")
    return data