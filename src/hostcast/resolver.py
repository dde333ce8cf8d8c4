"""Target host resolution.

Hosts come either from an inventory query or from a line-oriented list on
stdin. Either way the result is an ordered, non-empty list of hostnames.
"""

import sys
from typing import Iterable, Protocol, TextIO

from .errors import EmptyHostSet
from .inventory import Asset
from .logging import get_logger
from .types import Options, Selector

logger = get_logger(__name__)

COMMENT_MARKER = "#"


class AssetFinder(Protocol):
    """Anything that can answer an inventory query."""

    def find(self, selector: Selector) -> list[Asset]:
        ...


def read_host_list(lines: Iterable[str]) -> list[str]:
    """Parse a newline-delimited host list.

    Blank lines and ``#`` comments are dropped and trailing whitespace is
    trimmed. Order and duplicates are preserved.

    Example:
        >>> read_host_list(["web01\\n", "# db hosts\\n", "\\n", "db01  \\n"])
        ['web01', 'db01']
    """
    hosts = []
    for line in lines:
        host = line.rstrip()
        if not host.strip() or host.lstrip().startswith(COMMENT_MARKER):
            continue
        hosts.append(host)
    return hosts


def hosts_from_assets(assets: Iterable[Asset]) -> list[str]:
    """Hostnames of assets in service order, skipping assets without one."""
    hosts = []
    for asset in assets:
        if not asset.hostname:
            logger.warning("Skipping asset without a hostname", tag=asset.tag)
            continue
        hosts.append(asset.hostname)
    return hosts


def resolve(
    options: Options,
    client: AssetFinder | None = None,
    stream: TextIO | None = None,
) -> list[str]:
    """Resolve the run's target hosts.

    Args:
        options: Run options; ``options.input`` selects the stdin source
        client: Inventory client, required unless reading from stdin
        stream: Host list stream (defaults to sys.stdin)

    Returns:
        Ordered list of hostnames

    Raises:
        EmptyHostSet: If no hosts were found
    """
    if options.input:
        hosts = read_host_list(stream or sys.stdin)
        logger.info("Read hosts from stdin", count=len(hosts))
    else:
        if client is None:
            raise ValueError("An inventory client is required to resolve a selector")
        with logger.performance("Inventory query", selector=options.describe_source()):
            assets = client.find(options.selector)
        hosts = hosts_from_assets(assets)

    if not hosts:
        raise EmptyHostSet(options.describe_source())
    return hosts
