"""Read-only reports over the ``dns_queries`` log.

Every report is recomputed from the stored rows on each call; nothing is
cached.
"""

from __future__ import annotations

from typing import List

import pandas as pd

from ..core.constants import DNS_TABLE
from ..core.decorators import handle_errors, log_performance
from ..core.models import DNSEntry, DistinctQuery, MostQueriedDomain, Role, TimeBucket
from ..exceptions import QueryError
from .store import DNSStore

# Transaction ids are concatenated in insertion order. Ties on the count fall
# back to the domain name so repeated reads agree.
SQL_MOST_QUERIED_DOMAINS = f"""
SELECT
    query_name,
    string_agg(CAST(event AS VARCHAR), ',' ORDER BY id) AS events,
    COUNT(*) AS query_count
FROM {DNS_TABLE}
WHERE request_type = ?
GROUP BY query_name
ORDER BY query_count DESC, query_name
"""

# Timestamps are RFC3339 text; the first 16 characters with the date/time
# separator normalised give the minute bucket ``YYYY-MM-DD HH:MM``.
SQL_QUERIES_OVER_TIME = f"""
SELECT
    substr(replace("timestamp", 'T', ' '), 1, 16) AS bucket,
    COUNT(*) AS query_count
FROM {DNS_TABLE}
GROUP BY bucket
ORDER BY bucket
"""

SQL_UNIQUE_DOMAINS = f"""
SELECT DISTINCT source_ip, query_name, request_type
FROM {DNS_TABLE}
ORDER BY source_ip, query_name, request_type
"""

SQL_DNS_ENTRIES = f"""
SELECT id, "timestamp", source_ip, query_name, query_type, cname_path, response_ips, request_type, event
FROM {DNS_TABLE}
ORDER BY id
"""


@handle_errors(QueryError)
@log_performance
def get_most_queried_domains(store: DNSStore) -> List[MostQueriedDomain]:
    """Query-role rows grouped by domain, most frequent first.

    ``events`` holds every transaction id seen for the domain, duplicates
    included.
    """
    rows = store.query(SQL_MOST_QUERIED_DOMAINS, [Role.QUERY.value])
    return [
        MostQueriedDomain(query_name=name, events=events or "", count=int(count))
        for name, events, count in rows
    ]


@handle_errors(QueryError)
@log_performance
def get_queries_over_time(store: DNSStore) -> List[TimeBucket]:
    """Number of transactions (queries and responses) per minute, ascending."""
    rows = store.query(SQL_QUERIES_OVER_TIME)
    return [TimeBucket(bucket=bucket, count=int(count)) for bucket, count in rows]


@handle_errors(QueryError)
@log_performance
def get_unique_domains(store: DNSStore) -> List[DistinctQuery]:
    rows = store.query(SQL_UNIQUE_DOMAINS)
    return [
        DistinctQuery(source_ip=source_ip, query_name=name, role=role)
        for source_ip, name, role in rows
    ]


@handle_errors(QueryError)
def get_dns_entries(store: DNSStore) -> List[DNSEntry]:
    return [DNSEntry.from_row(row) for row in store.query(SQL_DNS_ENTRIES)]


@handle_errors(QueryError)
def dns_entries_df(store: DNSStore) -> pd.DataFrame:
    """All stored rows as a DataFrame with ``timestamp`` parsed to datetimes.

    The verbatim text is kept in ``timestamp_text``; unparsable values become
    ``NaT``.
    """
    df = store.query_df(SQL_DNS_ENTRIES)
    df = df.rename(columns={"event": "txn_id"})
    df["timestamp_text"] = df["timestamp"]
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, format="ISO8601", errors="coerce")
    return df


__all__ = [
    "get_most_queried_domains",
    "get_queries_over_time",
    "get_unique_domains",
    "get_dns_entries",
    "dns_entries_df",
]
