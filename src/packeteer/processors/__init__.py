from __future__ import annotations

from .dns_processor import DNSProcessor, decode_dns_layer, format_timestamp

__all__ = [
    "DNSProcessor",
    "decode_dns_layer",
    "format_timestamp",
]
