from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, List

from scapy.packet import NoPayload

from ..core.constants import (
    ALIAS_SEPARATOR,
    DNS_QUERY_TYPE_MAP,
    DNS_TYPE_A,
    DNS_TYPE_AAAA,
    DNS_TYPE_CNAME,
)
from ..core.models import DNSTransaction, Role
from ..exceptions import DecodeError
from ..logging import get_logger

logger = get_logger(__name__)


def format_timestamp(ts: datetime) -> str:
    """Render ``ts`` as RFC3339 text with second precision.

    Naive datetimes are taken to be UTC.
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.replace(microsecond=0)
    if ts.utcoffset() == timedelta(0):
        return ts.strftime("%Y-%m-%dT%H:%M:%SZ")
    return ts.isoformat()


def _records(section: Any) -> List[Any]:
    """Return the resource records of a question/answer section as a list."""
    if section is None:
        return []
    if isinstance(section, list):
        return list(section)
    # Older scapy releases chain records through their payloads.
    records = []
    while section is not None and not isinstance(section, NoPayload):
        records.append(section)
        section = section.payload
    return records


def _name(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return str(value).rstrip(".")


def _query_type(qtype: Any) -> str:
    try:
        return DNS_QUERY_TYPE_MAP.get(int(qtype), str(qtype))
    except (TypeError, ValueError):
        return str(qtype)


def handle_questions(dns: Any, txn: DNSTransaction) -> None:
    """Copy the question name and type into ``txn``.

    Every question overwrites the previous one, so only the last question of
    the message is kept.
    """
    for question in _records(getattr(dns, "qd", None)):
        txn.query_name = _name(question.qname)
        txn.query_type = _query_type(question.qtype)


def handle_answers(dns: Any, txn: DNSTransaction) -> None:
    """Build the CNAME path and response address list from the answers."""
    cname_path: List[str] = []
    for answer in _records(getattr(dns, "an", None)):
        rtype = getattr(answer, "type", None)
        if rtype == DNS_TYPE_CNAME:
            cname_path.append(_name(answer.rdata) + ALIAS_SEPARATOR)
        elif rtype in (DNS_TYPE_A, DNS_TYPE_AAAA) and answer.rdata is not None:
            txn.response_ips.append(str(answer.rdata))
    txn.cname_path = "".join(cname_path)


def decode_dns_layer(dns: Any, source_ip: str, timestamp: str) -> DNSTransaction:
    """Turn a decoded scapy ``DNS`` layer into a :class:`DNSTransaction`.

    ``source_ip`` is the address of the IP layer carrying the message and
    ``timestamp`` the RFC3339 capture time of the packet.
    """
    try:
        txn = DNSTransaction(
            timestamp=timestamp,
            source_ip=source_ip,
            txn_id=int(dns.id),
        )
        handle_questions(dns, txn)
        handle_answers(dns, txn)
        txn.role = Role.RESPONSE if dns.qr else Role.QUERY
    except (AttributeError, TypeError, ValueError) as exc:
        logger.error("Failed to decode DNS layer from %s: %s", source_ip, exc, exc_info=True)
        raise DecodeError(str(exc), context=f"DNS layer from {source_ip or 'unknown source'}") from exc
    return txn


class DNSProcessor:
    """Decode DNS layers and keep a running count of transactions."""

    def __init__(self) -> None:
        self.decoded = 0
        self.failed = 0

    def reset(self) -> None:
        self.decoded = 0
        self.failed = 0

    def process_layer(self, dns: Any, source_ip: str, timestamp: datetime) -> DNSTransaction:
        txn = decode_dns_layer(dns, source_ip, format_timestamp(timestamp))
        self.decoded += 1
        logger.debug(
            "Decoded DNS %s %s (%s) id=%s from %s",
            txn.role,
            txn.query_name,
            txn.query_type,
            txn.txn_id,
            source_ip,
        )
        return txn


__all__ = [
    "DNSProcessor",
    "decode_dns_layer",
    "format_timestamp",
    "handle_questions",
    "handle_answers",
]
