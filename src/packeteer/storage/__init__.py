from .store import DNSStore, open_store
from .queries import (
    get_most_queried_domains,
    get_queries_over_time,
    get_unique_domains,
    get_dns_entries,
    dns_entries_df,
)

__all__ = [
    "DNSStore",
    "open_store",
    "get_most_queried_domains",
    "get_queries_over_time",
    "get_unique_domains",
    "get_dns_entries",
    "dns_entries_df",
]
