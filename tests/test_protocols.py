import pytest

from iprouter.protocols import (
    ARP_REPLY,
    BROADCAST_MAC,
    ETHERTYPE_ARP,
    ETHERTYPE_IP,
    ArpHeader,
    EtherHeader,
    IcmpHeader,
    IpHeader,
)

MAC_A = bytes.fromhex("020000000001")
MAC_B = bytes.fromhex("020000000002")


def test_ether_header_wire_layout():
    header = EtherHeader(dhost=BROADCAST_MAC, shost=MAC_A, ether_type=ETHERTYPE_ARP)
    assert header.to_bytes() == BROADCAST_MAC + MAC_A + b"\x08\x06"


def test_ether_header_round_trip_ignores_payload():
    header = EtherHeader(dhost=MAC_B, shost=MAC_A, ether_type=ETHERTYPE_IP)
    parsed = EtherHeader.from_bytes(header.to_bytes() + b"payload")
    assert parsed == header


def test_ether_header_short_data_rejected():
    with pytest.raises(ValueError):
        EtherHeader.from_bytes(b"\x00" * (EtherHeader.SIZE - 1))


def test_ether_header_bad_mac_rejected():
    with pytest.raises(ValueError):
        EtherHeader(dhost=b"\x00" * 5, shost=MAC_A, ether_type=ETHERTYPE_IP)


def test_arp_header_defaults_and_size():
    header = ArpHeader(opcode=ARP_REPLY, shwa=MAC_A, sprotoa=0x0A000001,
                       thwa=MAC_B, tprotoa=0x0A000002)
    data = header.to_bytes()
    assert len(data) == ArpHeader.SIZE
    assert data[:8] == b"\x00\x01\x08\x00\x06\x04\x00\x02"
    assert data[8:14] == MAC_A


def test_arp_header_round_trip():
    header = ArpHeader(opcode=ARP_REPLY, shwa=MAC_A, sprotoa=0xC0A80001,
                       thwa=MAC_B, tprotoa=0xC0A80002)
    assert ArpHeader.from_bytes(header.to_bytes()) == header


def test_arp_header_short_data_rejected():
    with pytest.raises(ValueError):
        ArpHeader.from_bytes(b"\x00" * 27)


def test_ip_header_version_and_ihl_share_first_byte():
    header = IpHeader(ttl=69, proto=1, source_addr=0x0A000001, dest_addr=0x0A000002)
    data = header.to_bytes()
    assert len(data) == IpHeader.SIZE
    assert data[0] == 0x45
    assert data[8] == 69


def test_ip_header_round_trip():
    header = IpHeader(tos=0, tot_len=84, id=4, frag=0, ttl=3, proto=1,
                      checksum=0x1234, source_addr=0xC0A80101, dest_addr=0xC0A80202)
    parsed = IpHeader.from_bytes(header.to_bytes())
    assert parsed == header
    assert (parsed.version, parsed.ihl) == (4, 5)


def test_ip_header_short_data_rejected():
    with pytest.raises(ValueError):
        IpHeader.from_bytes(b"\x45" * 10)


def test_icmp_header_round_trip():
    header = IcmpHeader(mtype=8, mcode=0, check=0xBEEF, id=7, seq=9)
    data = header.to_bytes()
    assert len(data) == IcmpHeader.SIZE
    assert data[0] == 8
    assert IcmpHeader.from_bytes(data) == header


def test_icmp_header_short_data_rejected():
    with pytest.raises(ValueError):
        IcmpHeader.from_bytes(b"\x08\x00")