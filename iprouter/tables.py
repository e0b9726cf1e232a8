"""Routing and ARP table entries, their file formats, and the Internet checksum."""

from __future__ import annotations

import logging
import os
import re
import socket
import struct
from dataclasses import dataclass

log = logging.getLogger(__name__)

_MAC_RE = re.compile(r"[0-9A-Fa-f]{2}(?::[0-9A-Fa-f]{2}){5}")
_ATOI_RE = re.compile(r"\s*([+-]?\d+)")
_RTABLE_SPLIT = re.compile(r"[ .]")


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One routing table line; addresses and mask are host-order integers."""

    prefix: int
    next_hop: int
    mask: int
    interface: int


@dataclass(frozen=True, slots=True)
class ArpEntry:
    """IPv4 address (host-order integer) bound to a MAC address."""

    ip: int
    mac: bytes


def checksum(data: bytes) -> int:
    """Internet checksum (RFC 791/792) of data, as a host-order integer."""
    data = bytes(data)
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack(f"!{len(data) // 2}H", data))
    total = (total >> 16) + (total & 0xFFFF)
    total += total >> 16
    return ~total & 0xFFFF


def hwaddr_aton(text: str) -> bytes:
    """Parse a colon-separated MAC address such as '00:11:22:33:44:55'."""
    match = _MAC_RE.match(text)
    if match is None:
        raise ValueError(f"not a MAC address: {text!r}")
    return bytes.fromhex(match.group(0).replace(":", ""))


def _atoi(token: str) -> int:
    match = _ATOI_RE.match(token)
    return int(match.group(1)) if match else 0


def _octets_to_int(tokens: list[str]) -> int:
    padded = (tokens + ["0"] * 4)[:4]
    return int.from_bytes(bytes(_atoi(t) & 0xFF for t in padded), "big")


def read_rtable(path: str | os.PathLike) -> list[RouteEntry]:
    """Read a routing table of 'prefix next_hop mask interface' lines."""
    entries = []
    with open(path, encoding="ascii", errors="replace") as handle:
        for line in handle:
            if not line.strip():
                continue
            tokens = [token for token in _RTABLE_SPLIT.split(line) if token]
            entries.append(
                RouteEntry(
                    prefix=_octets_to_int(tokens[0:4]),
                    next_hop=_octets_to_int(tokens[4:8]),
                    mask=_octets_to_int(tokens[8:12]),
                    interface=_atoi(tokens[12]) if len(tokens) > 12 else 0,
                )
            )
    return entries


def parse_arp_table(path: str | os.PathLike) -> list[ArpEntry]:
    """Read a static ARP table of 'ip mac' lines."""
    log.debug("Parsing ARP table")
    entries = []
    with open(path, encoding="ascii", errors="replace") as handle:
        for line in handle:
            parts = line.split()
            if not parts:
                continue
            if len(parts) < 2:
                raise ValueError(f"ARP table line lacks a MAC address: {line.strip()!r}")
            ip_text, mac_text = parts[0], parts[1]
            log.debug("IP: %s MAC: %s", ip_text, mac_text)
            try:
                packed = socket.inet_aton(ip_text)
            except OSError as exc:
                raise ValueError(f"invalid IPv4 address: {ip_text!r}") from exc
            entries.append(ArpEntry(ip=int.from_bytes(packed, "big"), mac=hwaddr_aton(mac_text)))
    log.debug("Done parsing ARP table.")
    return entries