"""Raw Ethernet links the router sends and receives frames on."""

from __future__ import annotations

import fcntl
import logging
import select
import socket
import struct
from collections.abc import Iterable, Sequence

log = logging.getLogger(__name__)

MAX_PACKET_LEN = 1400
ROUTER_NUM_INTERFACES = 3

# ETH_P_ALL already in network byte order, as the packet socket expects.
_ETH_P_ALL = 768
_SIOCGIFADDR = 0x8915
_SIOCGIFHWADDR = 0x8927
_IFNAMSIZ = 16


class LinkError(OSError):
    """A link could not be opened, read, written or queried."""


class LinkSet:
    """An ordered set of links, addressed by interface index."""

    def __init__(self, sockets: Iterable[socket.socket], names: Iterable[str]) -> None:
        self._sockets = list(sockets)
        self.names = list(names)
        if len(self._sockets) != len(self.names):
            raise ValueError("each link needs exactly one interface name")

    @classmethod
    def open(cls, names: Sequence[str]) -> LinkSet:
        """Open a raw packet socket bound to each named interface."""
        sockets: list[socket.socket] = []
        try:
            for name in names:
                log.info("Setting up interface: %s", name)
                sock = socket.socket(socket.AF_PACKET, socket.SOCK_RAW, _ETH_P_ALL)
                sockets.append(sock)
                sock.bind((name, 0))
        except (OSError, AttributeError) as exc:
            for sock in sockets:
                sock.close()
            raise LinkError(f"cannot open link: {exc}") from exc
        return cls(sockets, names)

    def __len__(self) -> int:
        return len(self._sockets)

    def __enter__(self) -> LinkSet:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _socket(self, interface: int) -> socket.socket:
        if not 0 <= interface < len(self._sockets):
            raise LinkError(f"no interface {interface}")
        return self._sockets[interface]

    def send(self, interface: int, frame: bytes) -> int:
        """Write a frame on the given interface; returns the bytes written."""
        try:
            return self._socket(interface).send(bytes(frame))
        except LinkError:
            raise
        except OSError as exc:
            raise LinkError(f"write on interface {interface}: {exc}") from exc

    def receive(self) -> tuple[int, bytes]:
        """Block until a frame arrives; return its interface index and data."""
        try:
            ready, _, _ = select.select(self._sockets, [], [])
        except (OSError, ValueError) as exc:
            raise LinkError(f"select: {exc}") from exc
        interface, sock = next((i, s) for i, s in enumerate(self._sockets) if s in ready)
        try:
            return interface, sock.recv(MAX_PACKET_LEN)
        except OSError as exc:
            raise LinkError(f"read on interface {interface}: {exc}") from exc

    def _ifreq(self, interface: int, request: int) -> bytes:
        sock = self._socket(interface)
        name = self.names[interface].encode()
        if len(name) >= _IFNAMSIZ:
            raise LinkError(f"interface name too long: {self.names[interface]!r}")
        try:
            return fcntl.ioctl(sock.fileno(), request, struct.pack("256s", name))
        except (OSError, ValueError) as exc:
            raise LinkError(f"ioctl on {self.names[interface]}: {exc}") from exc

    def interface_ip(self, interface: int) -> str:
        """Dotted IPv4 address assigned to the interface."""
        return socket.inet_ntoa(self._ifreq(interface, _SIOCGIFADDR)[20:24])

    def interface_mac(self, interface: int) -> bytes:
        """Six-byte hardware address of the interface."""
        return self._ifreq(interface, _SIOCGIFHWADDR)[18:24]

    def close(self) -> None:
        for sock in self._sockets:
            sock.close()