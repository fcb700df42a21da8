from .config import settings, get_settings, Settings
from .constants import *  # noqa: F401,F403
from .models import (
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
from ..exceptions import (
    PacketeerError,
    EmptyPacketError,
    DecodeError,
    CaptureReadError,
    StorageError,
    StorageOpenError,
    StorageInsertError,
    QueryError,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "ProtocolTag",
    "Role",
    "PacketMetadata",
    "PacketRecord",
    "DNSTransaction",
    "DNSEntry",
    "MostQueriedDomain",
    "TimeBucket",
    "DistinctQuery",
    "PacketeerError",
    "EmptyPacketError",
    "DecodeError",
    "CaptureReadError",
    "StorageError",
    "StorageOpenError",
    "StorageInsertError",
    "QueryError",
] + [name for name in globals().keys() if name.isupper()]
