from .layer_classifier import (
    ClassifiedPacket,
    classify_layers,
    classify_packet,
    iter_layers,
    layer_tag,
)
from .pcap_reader import iter_packets

__all__ = [
    "ClassifiedPacket",
    "classify_layers",
    "classify_packet",
    "iter_layers",
    "iter_packets",
    "layer_tag",
]
