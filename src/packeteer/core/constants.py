"""Centralized constant definitions for packeteer."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# DNS helper dictionaries
# ---------------------------------------------------------------------------
DNS_QUERY_TYPE_MAP: dict[int, str] = {
    1: "A",
    2: "NS",
    5: "CNAME",
    6: "SOA",
    12: "PTR",
    13: "HINFO",
    15: "MX",
    16: "TXT",
    28: "AAAA",
    33: "SRV",
    35: "NAPTR",
    43: "DS",
    46: "RRSIG",
    47: "NSEC",
    48: "DNSKEY",
    64: "SVCB",
    65: "HTTPS",
    255: "ANY",
    257: "CAA",
}

DNS_TYPE_A = 1
DNS_TYPE_CNAME = 5
DNS_TYPE_AAAA = 28

# Appended after every alias in a CNAME path, the last one included.
ALIAS_SEPARATOR = ","

# Joins response addresses into the stored ``response_ips`` column.
RESPONSE_IP_SEPARATOR = ","

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
DNS_TABLE = "dns_queries"
DNS_ID_SEQUENCE = "dns_queries_id_seq"
DNS_QUERY_NAME_INDEX = "idx_dns_queries_query_name"
DNS_SOURCE_IP_INDEX = "idx_dns_queries_source_ip"
