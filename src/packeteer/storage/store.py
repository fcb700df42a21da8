"""Append-only duckdb store for DNS transactions."""

from __future__ import annotations

import os
from typing import Any, Optional, Sequence

import duckdb
import pandas as pd

from ..core.constants import (
    DNS_ID_SEQUENCE,
    DNS_QUERY_NAME_INDEX,
    DNS_SOURCE_IP_INDEX,
    DNS_TABLE,
)
from ..core.decorators import handle_errors
from ..core.models import DNSTransaction
from ..exceptions import StorageError, StorageInsertError, StorageOpenError
from ..logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    f"CREATE SEQUENCE IF NOT EXISTS {DNS_ID_SEQUENCE} START 1",
    f"""
    CREATE TABLE IF NOT EXISTS {DNS_TABLE} (
        id           BIGINT PRIMARY KEY DEFAULT nextval('{DNS_ID_SEQUENCE}'),
        "timestamp"  VARCHAR NOT NULL,
        source_ip    VARCHAR NOT NULL,
        query_name   VARCHAR NOT NULL,
        query_type   VARCHAR NOT NULL,
        cname_path   VARCHAR,
        response_ips VARCHAR,
        request_type VARCHAR NOT NULL,
        event        INTEGER
    )
    """,
    f"CREATE INDEX IF NOT EXISTS {DNS_QUERY_NAME_INDEX} ON {DNS_TABLE}(query_name)",
    f"CREATE INDEX IF NOT EXISTS {DNS_SOURCE_IP_INDEX} ON {DNS_TABLE}(source_ip)",
)

SQL_INSERT_ENTRY = f"""
INSERT INTO {DNS_TABLE}
("timestamp", source_ip, query_name, query_type, cname_path, response_ips, request_type, event)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


class DNSStore:
    """Owns the duckdb connection holding the ``dns_queries`` log.

    Rows are only ever appended; there is no update or delete. One store is
    the single writer for its file. Readers in the same process can use
    :meth:`cursor` while inserts continue. Other processes can read only
    once the writer has closed, by opening with ``read_only``.
    """

    def __init__(self, path: str, conn: duckdb.DuckDBPyConnection) -> None:
        self.path = path
        self._conn: Optional[duckdb.DuckDBPyConnection] = conn

    @classmethod
    def open(cls, path: str | os.PathLike, read_only: bool = False) -> "DNSStore":
        """Open (creating if needed) the store at ``path`` and ensure its schema.

        With ``read_only`` the file must already exist and no schema is
        created. duckdb lets one read-write process or any number of
        read-only processes hold a file, never both at once.
        """
        db_path = os.fspath(path)
        try:
            conn = duckdb.connect(db_path, read_only=read_only)
        except (duckdb.Error, OSError) as exc:
            logger.error("Cannot open DNS store at %s: %s", db_path, exc, exc_info=True)
            raise StorageOpenError(
                f"cannot open DNS store at {db_path}: {exc}",
                context=db_path,
                suggestion=(
                    "Check that the store exists and no writer holds it."
                    if read_only
                    else "Check that the parent directory exists and is writable."
                ),
            ) from exc
        if read_only:
            logger.info("Opened DNS store %s read-only", db_path)
            return cls(db_path, conn)
        try:
            migrate(conn)
        except duckdb.Error as exc:
            conn.close()
            logger.error("Cannot create schema in %s: %s", db_path, exc, exc_info=True)
            raise StorageOpenError(f"cannot create DNS schema: {exc}", context=db_path) from exc
        logger.info("Opened DNS store %s", db_path)
        return cls(db_path, conn)

    @property
    def closed(self) -> bool:
        return self._conn is None

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise StorageError("DNS store is closed", context=self.path)
        return self._conn

    def cursor(self) -> duckdb.DuckDBPyConnection:
        """Return a separate cursor on the store for concurrent reads."""
        return self.connection.cursor()

    @handle_errors(StorageInsertError)
    def insert(self, txn: DNSTransaction) -> None:
        """Append ``txn`` as one row."""
        self.insert_entry(
            txn.timestamp,
            txn.source_ip,
            txn.query_name,
            txn.query_type,
            txn.cname_path,
            txn.response_ips_text,
            txn.role.value,
            txn.txn_id,
        )

    @handle_errors(StorageInsertError)
    def insert_entry(
        self,
        timestamp: str,
        source_ip: str,
        query_name: str,
        query_type: str,
        cname_path: Optional[str],
        response_ips: Optional[str],
        request_type: str,
        event: Optional[int],
    ) -> None:
        """Append one row from raw column values."""
        self.connection.execute(
            SQL_INSERT_ENTRY,
            [timestamp, source_ip, query_name, query_type, cname_path, response_ips, request_type, event],
        )

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> list[tuple]:
        cur = self.cursor()
        try:
            return cur.execute(sql, params or []).fetchall()
        finally:
            cur.close()

    def query_df(self, sql: str, params: Optional[Sequence[Any]] = None) -> pd.DataFrame:
        cur = self.cursor()
        try:
            return cur.execute(sql, params or []).df()
        finally:
            cur.close()

    def count(self) -> int:
        return self.query(f"SELECT COUNT(*) FROM {DNS_TABLE}")[0][0]

    def close(self) -> None:
        """Release the handle; further use raises :class:`StorageError`."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Closed DNS store %s", self.path)

    def __enter__(self) -> "DNSStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def migrate(conn: duckdb.DuckDBPyConnection) -> None:
    """Create the sequence, table and indexes if they do not exist yet."""
    for statement in SCHEMA_STATEMENTS:
        conn.execute(statement)


def open_store(path: str | os.PathLike, read_only: bool = False) -> DNSStore:
    return DNSStore.open(path, read_only=read_only)


__all__ = ["DNSStore", "open_store", "migrate", "SCHEMA_STATEMENTS"]
