"""Wire formats of the Ethernet, ARP, IPv4 and ICMP headers the router handles."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

ETHERTYPE_IP = 0x0800
ETHERTYPE_ARP = 0x0806

ARP_HW_ETHERNET = 1
ARP_REQUEST = 1
ARP_REPLY = 2

IP_PROTO_ICMP = 1

ICMP_ECHO_REPLY = 0
ICMP_DEST_UNREACHABLE = 3
ICMP_ECHO_REQUEST = 8
ICMP_TIME_EXCEEDED = 11

BROADCAST_MAC = b"\xff" * 6
ZERO_MAC = b"\x00" * 6


def _require(data: bytes, size: int, name: str) -> None:
    if len(data) < size:
        raise ValueError(f"{name} needs {size} bytes, got {len(data)}")


def _as_mac(value: bytes, what: str) -> bytes:
    value = bytes(value)
    if len(value) != 6:
        raise ValueError(f"{what} must be 6 bytes, got {len(value)}")
    return value


@dataclass(slots=True)
class EtherHeader:
    """Ethernet II frame header."""

    dhost: bytes
    shost: bytes
    ether_type: int

    SIZE: ClassVar[int] = 14
    _FORMAT: ClassVar[struct.Struct] = struct.Struct("!6s6sH")

    def __post_init__(self) -> None:
        self.dhost = _as_mac(self.dhost, "destination MAC")
        self.shost = _as_mac(self.shost, "source MAC")

    @classmethod
    def from_bytes(cls, data: bytes) -> EtherHeader:
        _require(data, cls.SIZE, "Ethernet header")
        dhost, shost, ether_type = cls._FORMAT.unpack_from(data)
        return cls(dhost=dhost, shost=shost, ether_type=ether_type)

    def to_bytes(self) -> bytes:
        return self._FORMAT.pack(self.dhost, self.shost, self.ether_type)


@dataclass(slots=True)
class ArpHeader:
    """Ethernet/IPv4 ARP packet (RFC 826); addresses are host-order integers."""

    opcode: int = ARP_REQUEST
    shwa: bytes = ZERO_MAC
    sprotoa: int = 0
    thwa: bytes = ZERO_MAC
    tprotoa: int = 0
    hw_type: int = ARP_HW_ETHERNET
    proto_type: int = ETHERTYPE_IP
    hw_len: int = 6
    proto_len: int = 4

    SIZE: ClassVar[int] = 28
    _FORMAT: ClassVar[struct.Struct] = struct.Struct("!HHBBH6sI6sI")

    def __post_init__(self) -> None:
        self.shwa = _as_mac(self.shwa, "sender hardware address")
        self.thwa = _as_mac(self.thwa, "target hardware address")

    @classmethod
    def from_bytes(cls, data: bytes) -> ArpHeader:
        _require(data, cls.SIZE, "ARP header")
        (hw_type, proto_type, hw_len, proto_len, opcode,
         shwa, sprotoa, thwa, tprotoa) = cls._FORMAT.unpack_from(data)
        return cls(
            opcode=opcode,
            shwa=shwa,
            sprotoa=sprotoa,
            thwa=thwa,
            tprotoa=tprotoa,
            hw_type=hw_type,
            proto_type=proto_type,
            hw_len=hw_len,
            proto_len=proto_len,
        )

    def to_bytes(self) -> bytes:
        return self._FORMAT.pack(
            self.hw_type, self.proto_type, self.hw_len, self.proto_len,
            self.opcode, self.shwa, self.sprotoa, self.thwa, self.tprotoa,
        )


@dataclass(slots=True)
class IpHeader:
    """IPv4 header without options; addresses are host-order integers."""

    version: int = 4
    ihl: int = 5
    tos: int = 0
    tot_len: int = 20
    id: int = 0
    frag: int = 0
    ttl: int = 64
    proto: int = 0
    checksum: int = 0
    source_addr: int = 0
    dest_addr: int = 0

    SIZE: ClassVar[int] = 20
    _FORMAT: ClassVar[struct.Struct] = struct.Struct("!BBHHHBBHII")

    @classmethod
    def from_bytes(cls, data: bytes) -> IpHeader:
        _require(data, cls.SIZE, "IPv4 header")
        (ver_ihl, tos, tot_len, ident, frag, ttl, proto,
         check, source, dest) = cls._FORMAT.unpack_from(data)
        return cls(
            version=ver_ihl >> 4,
            ihl=ver_ihl & 0x0F,
            tos=tos,
            tot_len=tot_len,
            id=ident,
            frag=frag,
            ttl=ttl,
            proto=proto,
            checksum=check,
            source_addr=source,
            dest_addr=dest,
        )

    def to_bytes(self) -> bytes:
        ver_ihl = ((self.version & 0x0F) << 4) | (self.ihl & 0x0F)
        return self._FORMAT.pack(
            ver_ihl, self.tos, self.tot_len, self.id, self.frag, self.ttl,
            self.proto, self.checksum, self.source_addr, self.dest_addr,
        )


@dataclass(slots=True)
class IcmpHeader:
    """ICMP header with the echo identifier and sequence words."""

    mtype: int = ICMP_ECHO_REQUEST
    mcode: int = 0
    check: int = 0
    id: int = 0
    seq: int = 0

    SIZE: ClassVar[int] = 8
    _FORMAT: ClassVar[struct.Struct] = struct.Struct("!BBHHH")

    @classmethod
    def from_bytes(cls, data: bytes) -> IcmpHeader:
        _require(data, cls.SIZE, "ICMP header")
        mtype, mcode, check, ident, seq = cls._FORMAT.unpack_from(data)
        return cls(mtype=mtype, mcode=mcode, check=check, id=ident, seq=seq)

    def to_bytes(self) -> bytes:
        return self._FORMAT.pack(self.mtype, self.mcode, self.check, self.id, self.seq)


__all__ = [
    "ARP_HW_ETHERNET",
    "ARP_REPLY",
    "ARP_REQUEST",
    "ArpHeader",
    "BROADCAST_MAC",
    "ETHERTYPE_ARP",
    "ETHERTYPE_IP",
    "EtherHeader",
    "ICMP_DEST_UNREACHABLE",
    "ICMP_ECHO_REPLY",
    "ICMP_ECHO_REQUEST",
    "ICMP_TIME_EXCEEDED",
    "IP_PROTO_ICMP",
    "IcmpHeader",
    "IpHeader",
    "ZERO_MAC",
    "field",
]