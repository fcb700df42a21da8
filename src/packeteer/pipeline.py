"""Drive packets through classification, DNS decoding and storage."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from typing import Callable, Iterable, Optional

from scapy.packet import Packet

from .core.config import settings
from .core.decorators import log_performance
from .core.models import PacketRecord
from .exceptions import EmptyPacketError, StorageInsertError
from .logging import get_logger
from .parsers.layer_classifier import ClassifiedPacket, classify_packet
from .parsers.pcap_reader import iter_packets
from .processors.dns_processor import DNSProcessor
from .storage.store import DNSStore

logger = get_logger(__name__)

RecordCallback = Callable[[PacketRecord, int], None]


@dataclass
class PipelineStats:
    packets: int = 0
    records: int = 0
    skipped: int = 0
    transactions: int = 0
    failures: int = 0


@dataclass
class CapturePipeline:
    """Process packets one at a time, in capture order, into ``store``.

    By default packets with no recognised layer and per-packet decode or
    insert failures are counted and skipped. With ``strict`` set they are
    raised and the run halts.
    """

    store: DNSStore
    strict: bool = field(default_factory=lambda: settings.strict)
    on_record: Optional[RecordCallback] = None
    dns_processor: DNSProcessor = field(default_factory=DNSProcessor)
    stats: PipelineStats = field(default_factory=PipelineStats)

    def process(self, packet: Packet) -> ClassifiedPacket:
        """Classify ``packet``, persist its DNS transaction and emit its record."""
        self.stats.packets += 1
        failed_before = self.dns_processor.failed
        classified = classify_packet(packet, dns_processor=self.dns_processor, strict=self.strict)
        if self.dns_processor.failed > failed_before:
            self.stats.failures += 1
            logger.warning("Packet %s: DNS layer could not be decoded", self.stats.packets)

        if classified.record is None:
            if self.strict:
                raise EmptyPacketError(
                    f"packet {self.stats.packets} has no recognised layers",
                    suggestion="Disable strict mode to skip such packets.",
                )
            self.stats.skipped += 1
            logger.debug("Packet %s has no recognised layers", self.stats.packets)

        if classified.transaction is not None:
            try:
                self.store.insert(classified.transaction)
            except StorageInsertError:
                if self.strict:
                    raise
                self.stats.failures += 1
                logger.warning("Dropped DNS transaction from packet %s", self.stats.packets)
            else:
                self.stats.transactions += 1

        if classified.record is not None:
            if self.on_record is not None:
                self.on_record(classified.record, self.stats.records)
            self.stats.records += 1
        return classified

    @log_performance
    def run(self, packets: Iterable[Packet]) -> PipelineStats:
        """Process every packet of ``packets`` and return the running totals."""
        for packet in packets:
            self.process(packet)
        logger.info("Pipeline finished: %s", asdict(self.stats))
        return self.stats


def run_capture(
    path: str | os.PathLike,
    store: DNSStore,
    *,
    strict: Optional[bool] = None,
    on_record: Optional[RecordCallback] = None,
    max_packets: Optional[int] = None,
) -> PipelineStats:
    """Run a :class:`CapturePipeline` over the capture file at ``path``."""
    pipeline = CapturePipeline(
        store=store,
        strict=settings.strict if strict is None else strict,
        on_record=on_record,
    )
    limit = settings.max_packets if max_packets is None else max_packets
    return pipeline.run(iter_packets(path, max_packets=limit))


__all__ = ["CapturePipeline", "PipelineStats", "RecordCallback", "run_capture"]
