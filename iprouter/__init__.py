"""A small IPv4 software router with ARP, ICMP and longest-prefix-match forwarding."""

__version__ = "0.1.0"

__all__ = ["protocols", "tables", "links", "trie", "router"]