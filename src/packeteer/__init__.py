# src/packeteer/__init__.py
from .core.models import (
    ProtocolTag,
    Role,
    PacketMetadata,
    PacketRecord,
    DNSTransaction,
    DNSEntry,
    MostQueriedDomain,
    TimeBucket,
    DistinctQuery,
)
from .parsers import classify_layers, classify_packet, iter_packets
from .processors import DNSProcessor, decode_dns_layer
from .storage import (
    DNSStore,
    open_store,
    get_most_queried_domains,
    get_queries_over_time,
    get_unique_domains,
    get_dns_entries,
    dns_entries_df,
)
from .pipeline import CapturePipeline, PipelineStats, run_capture


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
    "classify_layers",
    "classify_packet",
    "iter_packets",
    "DNSProcessor",
    "decode_dns_layer",
    "DNSStore",
    "open_store",
    "get_most_queried_domains",
    "get_queries_over_time",
    "get_unique_domains",
    "get_dns_entries",
    "dns_entries_df",
    "CapturePipeline",
    "PipelineStats",
    "run_capture",
]
