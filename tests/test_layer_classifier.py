"""Tests for folding decoded layers into packet records."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from scapy.layers.inet import IP, TCP
from scapy.layers.l2 import Ether
from scapy.packet import Raw

from packeteer.core.models import PacketMetadata, ProtocolTag, Role
from packeteer.exceptions import DecodeError
from packeteer.parsers.layer_classifier import classify_layers, classify_packet, iter_layers
from packeteer.processors import DNSProcessor

from tests.fixtures.packet_factory import PacketFactory

TS = datetime(2024, 1, 1, 12, 30, 15, tzinfo=timezone.utc)
META = PacketMetadata(timestamp=TS, length=74, capture_length=74)


def test_no_recognised_layer_yields_no_record():
    result = classify_layers([Raw(load=b"\x00\x01")], META)
    assert result.record is None
    assert result.transaction is None


def test_empty_layer_sequence_yields_no_record():
    assert classify_layers([], META).record is None


def test_metadata_is_required():
    with pytest.raises(ValueError):
        classify_layers([Ether()], None)


def test_ethernet_ipv4_tcp_sets_addresses_ports_and_tag():
    pkt = PacketFactory.tcp_packet("10.0.0.1", "10.0.0.2", 51000, 80)
    record, txn = classify_packet(pkt, META)
    assert txn is None
    assert record.protocol is ProtocolTag.TCP
    assert record.source_ip == "10.0.0.1"
    assert record.destination_ip == "10.0.0.2"
    assert record.source_port == "51000"
    assert record.destination_port == "80"
    assert record.timestamp == TS
    assert record.length == 74
    assert record.capture_length == 74


def test_tag_reflects_last_recognised_layer():
    record, _ = classify_layers([Ether(), IP(src="1.1.1.1", dst="2.2.2.2"), Raw(load=b"x")], META)
    assert record.protocol is ProtocolTag.IPV4
    assert record.source_port == ""
    assert record.destination_port == ""


def test_ethernet_only_is_a_sparse_but_real_record():
    record, _ = classify_layers([Ether()], META)
    assert record is not None
    assert record.protocol is ProtocolTag.ETH
    assert record.source_ip == ""


def test_unrecognised_layers_are_skipped():
    record, _ = classify_layers([Raw(load=b"x"), IP(src="1.1.1.1", dst="2.2.2.2"), Raw(load=b"y")], META)
    assert record.protocol is ProtocolTag.IPV4
    assert record.source_ip == "1.1.1.1"


def test_arp_tag_without_addresses():
    pkt = PacketFactory.arp_request("00:11:22:33:44:55", "192.168.0.1", "192.168.0.2")
    record, _ = classify_packet(pkt, META)
    assert record.protocol is ProtocolTag.ARP
    assert record.source_ip == ""


def test_icmpv6_tag_and_ipv6_addresses():
    record, _ = classify_packet(PacketFactory.icmpv6_echo("fe80::1", "fe80::2"), META)
    assert record.protocol is ProtocolTag.ICMPV6
    assert record.source_ip == "fe80::1"
    assert record.destination_ip == "fe80::2"


def test_tls_record_over_tcp():
    record, _ = classify_packet(PacketFactory.tls_record("10.0.0.5", "10.0.0.6"), META)
    assert record.protocol is ProtocolTag.TLS
    assert record.destination_port == "443"


def test_icmp_error_quoted_headers_do_not_override_outer_header():
    raw = bytes(PacketFactory.icmp_port_unreachable("10.0.0.1", "10.0.0.9"))
    record, _ = classify_packet(Ether(raw), META)
    assert record.protocol is ProtocolTag.ICMPV4
    assert record.source_ip == "10.0.0.1"
    assert record.destination_ip == "10.0.0.9"
    assert record.source_port == ""


def test_dns_layer_triggers_decoding_with_resolved_source():
    pkt = PacketFactory.dns_query("192.168.1.10", qname="example.com", txn_id=4242)
    record, txn = classify_packet(pkt, META)
    assert record.protocol is ProtocolTag.DNS
    assert record.destination_port == "53"
    assert txn is not None
    assert txn.source_ip == "192.168.1.10"
    assert txn.timestamp == "2024-01-01T12:30:15Z"
    assert txn.query_name == "example.com"
    assert txn.role is Role.QUERY
    assert txn.txn_id == 4242


def test_dns_over_ipv6_uses_ipv6_source():
    record, txn = classify_packet(PacketFactory.dns_query_v6(src_ip="2001:db8::10"), META)
    assert record.protocol is ProtocolTag.DNS
    assert txn.source_ip == "2001:db8::10"
    assert txn.query_type == "AAAA"


def test_processor_counts_decoded_layers():
    processor = DNSProcessor()
    for pkt in PacketFactory.dns_query_response_flow():
        classify_packet(pkt, META, dns_processor=processor)
    classify_packet(PacketFactory.tcp_packet("10.0.0.1", "10.0.0.2", 1, 2), META, dns_processor=processor)
    assert processor.decoded == 2


def test_metadata_derived_from_packet():
    pkt = PacketFactory.tcp_packet("10.0.0.1", "10.0.0.2", 1, 2)
    pkt.time = 1704067200.5
    record, _ = classify_packet(pkt)
    assert record.timestamp == datetime(2024, 1, 1, 0, 0, 0, 500000, tzinfo=timezone.utc)
    assert record.capture_length == len(pkt)
    assert record.length == len(pkt)


def test_iter_layers_walks_outermost_first():
    pkt = Ether() / IP() / TCP()
    assert [type(layer) for layer in iter_layers(pkt)] == [Ether, IP, TCP]


class _FailingProcessor(DNSProcessor):
    def process_layer(self, dns, source_ip, timestamp):
        raise DecodeError("truncated answer section", context=f"DNS layer from {source_ip}")


def test_undecodable_dns_keeps_the_record():
    processor = _FailingProcessor()
    pkt = PacketFactory.dns_query("192.168.1.10", txn_id=3)
    record, txn = classify_packet(pkt, META, processor)
    assert txn is None
    assert record is not None
    assert record.protocol is ProtocolTag.DNS
    assert record.source_ip == "192.168.1.10"
    assert record.source_port == "12345"
    assert record.destination_port == "53"
    assert processor.failed == 1


def test_undecodable_dns_raises_when_strict():
    pkt = PacketFactory.dns_query("192.168.1.10")
    with pytest.raises(DecodeError):
        classify_packet(pkt, META, _FailingProcessor(), strict=True)
