"""Tests for custom exception hierarchy."""

import pytest

from packeteer.exceptions import (
    PacketeerError,
    EmptyPacketError,
    DecodeError,
    CaptureReadError,
    StorageError,
    StorageOpenError,
    StorageInsertError,
    QueryError,
)


def test_exceptions_can_be_caught():
    """Each custom exception should be catchable via the base class."""
    with pytest.raises(PacketeerError):
        raise PacketeerError()
    for exc_cls in [
        EmptyPacketError,
        DecodeError,
        CaptureReadError,
        StorageError,
        StorageOpenError,
        StorageInsertError,
        QueryError,
    ]:
        with pytest.raises(PacketeerError):
            raise exc_cls()


def test_storage_errors_share_a_base():
    for exc_cls in (StorageOpenError, StorageInsertError, QueryError):
        assert issubclass(exc_cls, StorageError)


def test_context_and_suggestion_are_kept():
    err = StorageOpenError("cannot open", context="/tmp/x.duckdb", suggestion="check permissions")
    assert str(err) == "cannot open"
    assert err.context == "/tmp/x.duckdb"
    assert err.suggestion == "check permissions"
