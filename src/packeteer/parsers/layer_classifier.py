"""Fold a packet's decoded layers into a :class:`PacketRecord`.

Layers are visited in wire order. Every recognised layer overwrites the
protocol tag, so the innermost recognised protocol wins, while address and
port pairs are filled by whichever IP and transport layers are present. A DNS
layer is handed to the DNS decoder together with the source address resolved
so far.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, NamedTuple, Optional, Type

from scapy.layers.dns import DNS
from scapy.layers.inet import ICMP, IP, TCP, UDP
from scapy.layers.inet6 import IPv6
from scapy.layers.l2 import ARP, Ether
from scapy.layers.tls.record import TLS
from scapy.packet import NoPayload, Packet

from ..core.models import DNSTransaction, PacketMetadata, PacketRecord, ProtocolTag
from ..exceptions import DecodeError
from ..logging import get_logger
from ..processors.dns_processor import DNSProcessor

logger = get_logger(__name__)

# Matched on the exact class: scapy's IPerror/UDPerror/TCPerror (headers
# quoted inside ICMP errors) subclass the real layers and must not count.
LAYER_TAGS: Dict[Type[Packet], ProtocolTag] = {
    Ether: ProtocolTag.ETH,
    IP: ProtocolTag.IPV4,
    IPv6: ProtocolTag.IPV6,
    TCP: ProtocolTag.TCP,
    UDP: ProtocolTag.UDP,
    ICMP: ProtocolTag.ICMPV4,
    TLS: ProtocolTag.TLS,
    ARP: ProtocolTag.ARP,
    DNS: ProtocolTag.DNS,
}


class ClassifiedPacket(NamedTuple):
    record: Optional[PacketRecord]
    transaction: Optional[DNSTransaction]


def layer_tag(layer: Any) -> Optional[ProtocolTag]:
    """Return the protocol tag for ``layer`` or ``None`` if unrecognised."""
    tag = LAYER_TAGS.get(type(layer))
    if tag is not None:
        return tag
    # scapy models each ICMPv6 message type as its own class.
    if type(layer).__name__.startswith("ICMPv6"):
        return ProtocolTag.ICMPV6
    return None


def iter_layers(packet: Packet) -> Iterator[Packet]:
    """Yield the layers of ``packet`` outermost first."""
    layer = packet
    while layer is not None and not isinstance(layer, NoPayload):
        yield layer
        layer = layer.payload


def classify_layers(
    layers: Iterable[Any],
    metadata: PacketMetadata,
    dns_processor: Optional[DNSProcessor] = None,
    strict: bool = False,
) -> ClassifiedPacket:
    """Classify an ordered sequence of decoded layers.

    Returns ``ClassifiedPacket(None, ...)`` when no layer contributed an
    address, a port or a protocol tag. Metadata is always present and does
    not count towards that check.

    A DNS layer that fails to decode raises :class:`DecodeError` when
    ``strict`` is set. Otherwise the transaction is ``None``, the record is
    still built and the processor's ``failed`` counter is bumped.
    """
    if metadata is None:
        raise ValueError("packet metadata is required for classification")
    processor = dns_processor or DNSProcessor()

    protocol: Optional[ProtocolTag] = None
    source_ip = destination_ip = ""
    source_port = destination_port = ""
    transaction: Optional[DNSTransaction] = None

    for layer in layers:
        tag = layer_tag(layer)
        if tag is None:
            continue
        protocol = tag
        if tag in (ProtocolTag.IPV4, ProtocolTag.IPV6):
            source_ip = str(layer.src)
            destination_ip = str(layer.dst)
        elif tag in (ProtocolTag.TCP, ProtocolTag.UDP):
            source_port = str(layer.sport)
            destination_port = str(layer.dport)
        elif tag is ProtocolTag.DNS:
            try:
                transaction = processor.process_layer(layer, source_ip, metadata.timestamp)
            except DecodeError:
                if strict:
                    raise
                # The record survives; only the transaction is lost.
                processor.failed += 1
                transaction = None
                logger.warning("Skipping undecodable DNS layer from %s", source_ip or "unknown source")

    if protocol is None:
        return ClassifiedPacket(None, transaction)

    record = PacketRecord(
        timestamp=metadata.timestamp,
        length=metadata.length,
        capture_length=metadata.capture_length,
        source_ip=source_ip,
        source_port=source_port,
        destination_ip=destination_ip,
        destination_port=destination_port,
        protocol=protocol,
    )
    return ClassifiedPacket(record, transaction)


def classify_packet(
    packet: Packet,
    metadata: Optional[PacketMetadata] = None,
    dns_processor: Optional[DNSProcessor] = None,
    strict: bool = False,
) -> ClassifiedPacket:
    """Classify a scapy ``packet``; metadata is derived from it when omitted."""
    if metadata is None:
        metadata = PacketMetadata.from_packet(packet)
    return classify_layers(iter_layers(packet), metadata, dns_processor, strict=strict)


__all__ = [
    "ClassifiedPacket",
    "LAYER_TAGS",
    "classify_layers",
    "classify_packet",
    "iter_layers",
    "layer_tag",
]
