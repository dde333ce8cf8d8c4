"""Tests for hostcast exceptions."""

from hostcast.errors import (
    EmptyHostSet,
    HostcastError,
    InventoryError,
    SelectorSyntaxError,
    TransportEmpty,
    UserAborted,
)
from hostcast.cli import to_click_error


def test_exit_codes_distinct():
    codes = [SelectorSyntaxError.exit_code, EmptyHostSet.exit_code,
             UserAborted.exit_code, InventoryError.exit_code]
    assert len(set(codes)) == len(codes)
    assert TransportEmpty.exit_code == 0


def test_empty_host_set_names_selector():
    error = EmptyHostSet("status:allocated pool:web")
    assert str(error) == "No hosts matched selector: status:allocated pool:web"
    assert error.source == "status:allocated pool:web"


def test_user_aborted_default_message():
    assert str(UserAborted()) == "Aborted by user"


def test_to_click_error_keeps_exit_code():
    exc = to_click_error(UserAborted())
    assert exc.exit_code == 4
    assert exc.message == "Aborted by user"


def test_all_subclass_base():
    for cls in (SelectorSyntaxError, EmptyHostSet, UserAborted, InventoryError, TransportEmpty):
        assert issubclass(cls, HostcastError)
