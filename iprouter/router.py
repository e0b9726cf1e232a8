"""IPv4 forwarding engine: ARP resolution, ICMP replies and longest-prefix routing."""

from __future__ import annotations

import argparse
import ipaddress
import logging
import sys
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from .links import LinkError, LinkSet
from .protocols import (
    ARP_REPLY,
    ARP_REQUEST,
    BROADCAST_MAC,
    ETHERTYPE_ARP,
    ETHERTYPE_IP,
    ICMP_DEST_UNREACHABLE,
    ICMP_ECHO_REPLY,
    ICMP_ECHO_REQUEST,
    ICMP_TIME_EXCEEDED,
    IP_PROTO_ICMP,
    ZERO_MAC,
    ArpHeader,
    EtherHeader,
    IcmpHeader,
    IpHeader,
)
from .tables import ArpEntry, RouteEntry, checksum, read_rtable
from .trie import RouteTrie

log = logging.getLogger(__name__)

_IP_OFFSET = EtherHeader.SIZE
_L4_OFFSET = EtherHeader.SIZE + IpHeader.SIZE
_ICMP_ERROR_ID = 4
_ICMP_ERROR_TTL = 69
_QUOTED_DATA_LEN = 8


class Links(Protocol):
    """What the router needs from the links it is attached to."""

    def send(self, interface: int, frame: bytes) -> int: ...

    def receive(self) -> tuple[int, bytes]: ...

    def interface_ip(self, interface: int) -> str: ...

    def interface_mac(self, interface: int) -> bytes: ...


@dataclass(slots=True)
class QueuedPacket:
    """A forwarded frame waiting for the MAC address of its next hop."""

    frame: bytes
    next_hop: int
    interface: int


def _address(text: str) -> int:
    return int(ipaddress.IPv4Address(text))


class Router:
    """Forwards frames between links using a static routing table."""

    def __init__(self, routes: Iterable[RouteEntry], links: Links) -> None:
        self.routes = list(routes)
        self.links = links
        self._trie = RouteTrie()
        for route in self.routes:
            self._trie.add(route)
        self.arp_table: dict[int, ArpEntry] = {}
        self.pending: deque[QueuedPacket] = deque()

    # Lookups -------------------------------------------------------------

    def best_route_linear(self, address: int) -> RouteEntry | None:
        """Longest matching route found by scanning the whole table."""
        best = None
        best_mask = 0
        for route in self.routes:
            if address & route.mask == route.prefix and route.mask > best_mask:
                best, best_mask = route, route.mask
        return best

    def best_route(self, address: int) -> RouteEntry | None:
        """Longest matching route found through the prefix trie."""
        return self._trie.lookup(address)

    def arp_lookup(self, address: int) -> ArpEntry | None:
        """Cached MAC binding for an IPv4 address, if one has been learned."""
        return self.arp_table.get(address)

    # Frame handling ------------------------------------------------------

    def handle_frame(self, interface: int, frame: bytes) -> None:
        """Process one frame received on the given interface."""
        frame = bytes(frame)
        if len(frame) < EtherHeader.SIZE:
            return
        ether = EtherHeader.from_bytes(frame)
        if ether.dhost not in (self.links.interface_mac(interface), BROADCAST_MAC):
            return

        payload = frame[_IP_OFFSET:]
        if ether.ether_type == ETHERTYPE_ARP:
            if len(payload) < ArpHeader.SIZE:
                return
            arp = ArpHeader.from_bytes(payload)
            if arp.opcode == ARP_REQUEST:
                self._send_arp_reply(interface, ether, arp)
            elif arp.opcode == ARP_REPLY:
                self._receive_arp_reply(arp)
        elif ether.ether_type == ETHERTYPE_IP and len(payload) >= IpHeader.SIZE:
            self._handle_ip(interface, ether, frame)

    def _handle_ip(self, interface: int, ether: EtherHeader, frame: bytes) -> None:
        ip = IpHeader.from_bytes(frame[_IP_OFFSET:])

        if ip.dest_addr == _address(self.links.interface_ip(interface)):
            if ip.proto == IP_PROTO_ICMP and len(frame) >= _L4_OFFSET + IcmpHeader.SIZE:
                icmp = IcmpHeader.from_bytes(frame[_L4_OFFSET:])
                if icmp.mtype == ICMP_ECHO_REQUEST and icmp.mcode == 0:
                    self._send_echo_reply(interface, frame)
            return

        received = ip.checksum
        ip.checksum = 0
        if checksum(ip.to_bytes()) != received:
            log.debug("dropping packet with bad IPv4 checksum")
            return

        if ip.ttl <= 1:
            self._send_icmp_error(interface, frame, ICMP_TIME_EXCEEDED)
            return
        ip.ttl -= 1

        route = self.best_route(ip.dest_addr)
        if route is None:
            self._send_icmp_error(interface, frame, ICMP_DEST_UNREACHABLE)
            return

        ip.checksum = checksum(ip.to_bytes())
        source_mac = self.links.interface_mac(route.interface)
        body = ip.to_bytes() + frame[_L4_OFFSET:]

        entry = self.arp_lookup(route.next_hop)
        if entry is None:
            held = EtherHeader(ether.dhost, source_mac, ether.ether_type).to_bytes() + body
            self.pending.append(QueuedPacket(held, route.next_hop, route.interface))
            self._send_arp_request(route)
            return

        out = EtherHeader(entry.mac, source_mac, ether.ether_type).to_bytes() + body
        self.links.send(route.interface, out)

    # ARP -----------------------------------------------------------------

    def _send_arp_reply(self, interface: int, ether: EtherHeader, request: ArpHeader) -> None:
        mac = self.links.interface_mac(interface)
        reply = ArpHeader(
            opcode=ARP_REPLY,
            shwa=mac,
            sprotoa=request.tprotoa,
            thwa=ether.shost,
            tprotoa=request.sprotoa,
        )
        frame = EtherHeader(ether.shost, mac, ETHERTYPE_ARP).to_bytes() + reply.to_bytes()
        self.links.send(interface, frame)

    def _send_arp_request(self, route: RouteEntry) -> None:
        mac = self.links.interface_mac(route.interface)
        request = ArpHeader(
            opcode=ARP_REQUEST,
            shwa=mac,
            sprotoa=_address(self.links.interface_ip(route.interface)),
            thwa=ZERO_MAC,
            tprotoa=route.next_hop,
        )
        frame = EtherHeader(BROADCAST_MAC, mac, ETHERTYPE_ARP).to_bytes() + request.to_bytes()
        self.links.send(route.interface, frame)

    def _receive_arp_reply(self, reply: ArpHeader) -> None:
        entry = ArpEntry(ip=reply.sprotoa, mac=reply.shwa)
        self.arp_table[entry.ip] = entry

        waiting: deque[QueuedPacket] = deque()
        while self.pending:
            packet = self.pending.popleft()
            if packet.next_hop != entry.ip:
                waiting.append(packet)
                continue
            frame = entry.mac + packet.frame[6:]
            self.links.send(packet.interface, frame)
        self.pending = waiting

    # ICMP ----------------------------------------------------------------

    def _send_echo_reply(self, interface: int, frame: bytes) -> None:
        ether = EtherHeader.from_bytes(frame)
        ip = IpHeader.from_bytes(frame[_IP_OFFSET:])

        ip.source_addr, ip.dest_addr = ip.dest_addr, ip.source_addr
        ip.checksum = 0
        ip.checksum = checksum(ip.to_bytes())

        end = _IP_OFFSET + ip.tot_len
        if not _L4_OFFSET + IcmpHeader.SIZE <= end <= len(frame):
            end = len(frame)
        icmp = IcmpHeader.from_bytes(frame[_L4_OFFSET:])
        icmp.mtype = ICMP_ECHO_REPLY
        icmp.check = 0
        data = frame[_L4_OFFSET + IcmpHeader.SIZE:end]
        icmp.check = checksum(icmp.to_bytes() + data)

        reply = (
            EtherHeader(ether.shost, ether.dhost, ether.ether_type).to_bytes()
            + ip.to_bytes()
            + icmp.to_bytes()
            + frame[_L4_OFFSET + IcmpHeader.SIZE:]
        )
        self.links.send(interface, reply)

    def _send_icmp_error(self, interface: int, frame: bytes, icmp_type: int) -> None:
        ether = EtherHeader.from_bytes(frame)
        original = IpHeader.from_bytes(frame[_IP_OFFSET:])
        quoted = frame[_IP_OFFSET:_L4_OFFSET + _QUOTED_DATA_LEN]

        icmp = IcmpHeader(mtype=icmp_type, mcode=0, check=0)
        icmp.check = checksum(icmp.to_bytes() + quoted)
        message = icmp.to_bytes() + quoted

        ip = IpHeader(
            tos=0,
            tot_len=IpHeader.SIZE + len(message),
            id=_ICMP_ERROR_ID,
            frag=0,
            ttl=_ICMP_ERROR_TTL,
            proto=IP_PROTO_ICMP,
            checksum=0,
            source_addr=_address(self.links.interface_ip(interface)),
            dest_addr=original.source_addr,
        )
        ip.checksum = checksum(ip.to_bytes())

        out = EtherHeader(ether.shost, ether.dhost, ETHERTYPE_IP).to_bytes() + ip.to_bytes() + message
        self.links.send(interface, out)

    # Main loop -----------------------------------------------------------

    def run(self) -> None:
        """Receive and handle frames until the links fail or the loop is interrupted."""
        while True:
            interface, frame = self.links.receive()
            self.handle_frame(interface, frame)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="iprouter",
        description="Forward IPv4 traffic between raw Ethernet links.",
    )
    parser.add_argument("rtable", help="routing table file")
    parser.add_argument("interfaces", nargs="+", help="names of the links, in interface order")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        routes = read_rtable(args.rtable)
    except OSError as exc:
        parser.error(f"cannot read routing table: {exc}")

    try:
        with LinkSet.open(args.interfaces) as links:
            Router(routes, links).run()
    except LinkError as exc:
        print(f"iprouter: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())