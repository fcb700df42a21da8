"""Core data structures for classified packets and DNS transactions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from .constants import RESPONSE_IP_SEPARATOR


class ProtocolTag(str, Enum):
    """Topmost recognised protocol of a packet."""

    ETH = "ETH"
    IPV4 = "IPv4"
    IPV6 = "IPv6"
    TCP = "TCP"
    UDP = "UDP"
    ICMPV4 = "ICMPv4"
    ICMPV6 = "ICMPv6"
    TLS = "TLS"
    ARP = "ARP"
    DNS = "DNS"

    def __str__(self) -> str:
        return self.value


class Role(str, Enum):
    """Whether a DNS message was a query or a response."""

    QUERY = "query"
    RESPONSE = "response"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PacketMetadata:
    """Capture metadata that accompanies every packet."""

    timestamp: datetime
    length: int
    capture_length: int

    @classmethod
    def from_packet(cls, packet: Any) -> "PacketMetadata":
        """Build metadata from a scapy packet.

        ``wirelen`` is only populated by the capture readers; packets built in
        memory fall back to their serialised size.
        """
        capture_length = len(packet)
        wirelen = getattr(packet, "wirelen", None)
        return cls(
            timestamp=datetime.fromtimestamp(float(packet.time), tz=timezone.utc),
            length=int(wirelen) if wirelen else capture_length,
            capture_length=capture_length,
        )


@dataclass(frozen=True)
class PacketRecord:
    """One-line summary of a classified packet."""

    timestamp: datetime
    length: int = 0
    capture_length: int = 0
    source_ip: str = ""
    source_port: str = ""
    destination_ip: str = ""
    destination_port: str = ""
    protocol: Optional[ProtocolTag] = None

    def __str__(self) -> str:
        return (
            f"Time: {self.timestamp.isoformat()}, Len: {self.length}/{self.capture_length}, "
            f"IP: {self.source_ip or 'N/A'}:{self.source_port or 'N/A'} -> "
            f"{self.destination_ip or 'N/A'}:{self.destination_port or 'N/A'}, "
            f"Proto: {self.protocol or 'N/A'}"
        )


@dataclass
class DNSTransaction:
    """A decoded DNS query or response, ready to be stored."""

    timestamp: str
    source_ip: str = ""
    query_name: str = ""
    query_type: str = ""
    cname_path: str = ""
    response_ips: List[str] = field(default_factory=list)
    role: Role = Role.QUERY
    txn_id: int = 0

    @property
    def response_ips_text(self) -> str:
        """Response addresses as stored in the ``response_ips`` column."""
        return RESPONSE_IP_SEPARATOR.join(self.response_ips)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored RFC3339 (or ``YYYY-MM-DD HH:MM:SS``) timestamp."""

    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass
class DNSEntry:
    """A row of the ``dns_queries`` table."""

    id: int
    timestamp: Optional[datetime]
    timestamp_text: str
    source_ip: str
    query_name: str
    query_type: str
    cname_path: str = ""
    response_ips: str = ""
    request_type: str = Role.QUERY.value
    txn_id: Optional[int] = None

    @classmethod
    def from_row(cls, row: tuple) -> "DNSEntry":
        """Create an entry from a ``SELECT *`` row of ``dns_queries``."""

        (
            entry_id,
            timestamp,
            source_ip,
            query_name,
            query_type,
            cname_path,
            response_ips,
            request_type,
            event,
        ) = row
        return cls(
            id=int(entry_id),
            timestamp=parse_timestamp(timestamp),
            timestamp_text=str(timestamp),
            source_ip=source_ip,
            query_name=query_name,
            query_type=query_type,
            cname_path=cname_path or "",
            response_ips=response_ips or "",
            request_type=request_type,
            txn_id=None if event is None else int(event),
        )

    @property
    def response_ip_list(self) -> List[str]:
        return [ip for ip in self.response_ips.split(RESPONSE_IP_SEPARATOR) if ip]


@dataclass(frozen=True)
class MostQueriedDomain:
    """A queried name with its transaction ids and query count."""

    query_name: str
    events: str
    count: int


@dataclass(frozen=True)
class TimeBucket:
    """Number of DNS messages seen in one minute."""

    bucket: str
    count: int


@dataclass(frozen=True)
class DistinctQuery:
    """A distinct (source address, name, role) triple."""

    source_ip: str
    query_name: str
    role: str


__all__ = [
    "ProtocolTag",
    "Role",
    "PacketMetadata",
    "PacketRecord",
    "DNSTransaction",
    "DNSEntry",
    "MostQueriedDomain",
    "TimeBucket",
    "DistinctQuery",
    "parse_timestamp",
]
