# iprouter

A small IPv4 software router for Linux. It reads a static routing table,
opens a raw packet socket on each of a set of network interfaces, and
handles every frame addressed to the interface's own MAC address or to
the broadcast address:

- ARP requests get an ARP reply carrying the receiving interface's MAC
  address;
- ARP replies are stored in the router's ARP cache, and any queued
  packets waiting for that next hop are sent on;
- ICMP echo requests sent to the address of the receiving interface are
  answered with an echo reply; other packets for that address are dropped;
- other IPv4 packets have their header checksum verified (bad ones are
  dropped), their TTL decremented and their checksum recomputed, and are
  forwarded along the longest matching route;
- a packet with a TTL of 1 or less gets an ICMP "time exceeded" (type 11)
  in return, and a packet with no matching route an ICMP "destination
  unreachable" (type 3); both quote the original IPv4 header and the
  first 8 bytes of its payload;
- when the next hop's MAC address is not yet known, the packet is held
  and an ARP request is broadcast on the outgoing interface.

Only the standard library is used.

## Installation

```
pip install .
```

## Running

Raw packet sockets need root privileges (or `CAP_NET_RAW`), and the
interface queries use Linux `ioctl` calls.

```
iprouter rtable0.txt rr-0-1 r-0 r-1
```

The first argument is the routing table file; the rest are the names of
the interfaces to attach to, in order. Interface `0` is the first name
given, interface `1` the second, and so on. The router runs until it is
interrupted (exit status 0) or a link fails (the error is printed and the
exit status is 1). A routing table that cannot be read is reported as a
usage error.

### Routing table format

One route per line: prefix, next hop, mask and output interface index,
separated by spaces. Blank lines are skipped. Masks must be contiguous
prefix masks.

```
192.168.0.0 192.168.0.2 255.255.255.0 0
192.168.1.0 192.168.1.2 255.255.255.0 1
10.0.0.0 192.168.1.2 255.0.0.0 1
```

## Using it as a library

Addresses and masks are plain integers in host order, so
`int(ipaddress.IPv4Address("10.1.2.3"))` gives the value to look up.

```python
import ipaddress

from iprouter.tables import read_rtable
from iprouter.trie import RouteTrie

routes = read_rtable("rtable0.txt")
trie = RouteTrie()
for route in routes:
    trie.add(route)

best = trie.lookup(int(ipaddress.IPv4Address("10.1.2.3")))
if best is not None:
    print(ipaddress.IPv4Address(best.next_hop), best.interface)
```

The modules are:

- `iprouter.protocols`: the `EtherHeader`, `ArpHeader`, `IpHeader` and
  `IcmpHeader` dataclasses, each with `from_bytes` and `to_bytes`, plus
  constants such as `ETHERTYPE_IP`, `ETHERTYPE_ARP` and the ICMP types;
- `iprouter.tables`: `RouteEntry`, `ArpEntry`, `checksum` (the Internet
  checksum), `hwaddr_aton` (parses `00:11:22:33:44:55` into 6 bytes),
  `read_rtable` and `parse_arp_table` (a static `ip mac` file);
- `iprouter.trie`: `RouteTrie`, with `add` and longest-prefix `lookup`;
- `iprouter.links`: `LinkSet`, which opens raw sockets on named
  interfaces (`LinkSet.open`), and offers `send`, a blocking `receive`,
  `interface_ip`, `interface_mac` and `close`; it is also a context
  manager and raises `LinkError` on failure;
- `iprouter.router`: `Router`, built from a list of routes and a link set.
  `handle_frame(interface, frame)` processes one frame and `run()` loops
  over incoming frames; `best_route`, `best_route_linear` and
  `arp_lookup` expose its lookups. `main(argv=None)` is the command.

`Router` accepts any object with `send`, `receive`, `interface_ip` and
`interface_mac` methods in place of a `LinkSet`, which makes it easy to
drive with recorded frames.

## What it does not do

- ARP cache entries are learned only from ARP replies and never expire;
  `parse_arp_table` reads static tables but the command does not use one.
- Held packets stay queued until a matching ARP reply arrives; there is
  no retry, timeout or limit.
- There is no dynamic routing, IPv6 support or IP option handling.

## Tests

```
pip install .[test]
pytest
```