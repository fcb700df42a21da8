from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Optional

from scapy.packet import Packet
from scapy.utils import PcapReader

from ..core.decorators import handle_errors, log_performance
from ..exceptions import CaptureReadError
from ..logging import get_logger

logger = get_logger(__name__)


@handle_errors(CaptureReadError)
@log_performance
def iter_packets(path: str | os.PathLike, max_packets: Optional[int] = None) -> Iterator[Packet]:
    """Stream scapy packets from a pcap or pcapng file in capture order."""

    file_path = Path(path)
    if not file_path.is_file():
        raise CaptureReadError(
            f"Capture file does not exist: {file_path}",
            suggestion="Check the path passed to 'packeteer read'.",
        )
    return _read(file_path, max_packets)


def _read(file_path: Path, max_packets: Optional[int]) -> Iterator[Packet]:
    count = 0
    with PcapReader(str(file_path)) as reader:
        for packet in reader:
            if max_packets is not None and count >= max_packets:
                logger.info("Reached max_packets limit of %s.", max_packets)
                break
            yield packet
            count += 1
    logger.info("Read %s packets from %s", count, file_path)
