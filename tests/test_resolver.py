"""Tests for target host resolution."""

from io import StringIO
from unittest.mock import MagicMock

import pytest

from hostcast.dispatch import build
from hostcast.errors import EmptyHostSet
from hostcast.inventory import Asset
from hostcast.resolver import hosts_from_assets, read_host_list, resolve
from hostcast.types import Options


class TestReadHostList:
    """Tests for line-oriented host list parsing."""

    def test_comments_and_blanks_dropped(self):
        hosts = read_host_list(StringIO("host1\n# comment\n\nhost2\n"))
        assert hosts == ["host1", "host2"]

    def test_trailing_whitespace_trimmed(self):
        assert read_host_list(["web01  \n", "web02\t\r\n"]) == ["web01", "web02"]

    def test_indented_comment_and_whitespace_only(self):
        assert read_host_list(["   \n", "  # old\n", "db01\n"]) == ["db01"]

    def test_order_and_duplicates_preserved(self):
        assert read_host_list(["b\n", "a\n", "b\n"]) == ["b", "a", "b"]

    def test_last_line_without_newline(self):
        assert read_host_list(StringIO("web01\nweb02")) == ["web01", "web02"]


class TestHostsFromAssets:
    """Tests for extracting hostnames from assets."""

    def test_service_order(self):
        assets = [Asset(tag="2", hostname="b.example"), Asset(tag="1", hostname="a.example")]
        assert hosts_from_assets(assets) == ["b.example", "a.example"]

    def test_asset_without_hostname_skipped(self):
        assets = [Asset(tag="1", hostname=""), Asset(tag="2", hostname="web02")]
        assert hosts_from_assets(assets) == ["web02"]


class TestResolve:
    """Tests for resolve()."""

    def test_stdin_source(self):
        options = Options(input=True)
        hosts = resolve(options, stream=StringIO("host1\n# comment\n\nhost2\n"))
        assert hosts == ["host1", "host2"]

    def test_stdin_source_ignores_client(self):
        client = MagicMock()
        resolve(Options(input=True), client, stream=StringIO("web01\n"))
        client.find.assert_not_called()

    def test_selector_source(self):
        client = MagicMock()
        client.find.return_value = [Asset(tag="1", hostname="web01.example.com")]
        options = Options(selector={"status": "allocated", "operation": "and"})

        assert resolve(options, client) == ["web01.example.com"]
        client.find.assert_called_once_with({"status": "allocated", "operation": "and"})

    def test_empty_inventory_raises_before_building(self):
        client = MagicMock()
        client.find.return_value = []
        options = Options(selector={"status": "allocated", "pool": "nowhere"})
        built = MagicMock(wraps=build)

        with pytest.raises(EmptyHostSet) as exc_info:
            hosts = resolve(options, client)
            built(options, hosts, "uptime")

        built.assert_not_called()
        assert "pool:nowhere" in str(exc_info.value)
        assert exc_info.value.exit_code == 3

    def test_empty_stdin_raises(self):
        with pytest.raises(EmptyHostSet) as exc_info:
            resolve(Options(input=True), stream=StringIO("# nothing\n\n"))
        assert "stdin" in str(exc_info.value)

    def test_selector_without_client(self):
        with pytest.raises(ValueError):
            resolve(Options(selector={"status": "allocated"}))
