"""Dispatch request building.

The command string is fixed here, once, before the operator confirms it:
either the typed words re-quoted for the remote shell, or the words joined
verbatim when the caller asked for pass-through.
"""

import shlex
from typing import Sequence

from .errors import EmptyHostSet
from .types import DispatchRequest, Options


def build_command(words: Sequence[str], passthrough: bool = False) -> str:
    """Join command words into the string the remote shell will run.

    Example:
        >>> build_command(["grep", "-c", "model name", "/proc/cpuinfo"])
        "grep -c 'model name' /proc/cpuinfo"
        >>> build_command(["ls /var/log | wc -l"], passthrough=True)
        'ls /var/log | wc -l'
    """
    if passthrough:
        return " ".join(words)
    return shlex.join(words)


def build(options: Options, hosts: Sequence[str], command: str) -> DispatchRequest:
    """Assemble the batch request for the execution backend.

    Raises:
        EmptyHostSet: If there are no targets
    """
    if not hosts:
        raise EmptyHostSet(options.describe_source())

    return DispatchRequest(
        command=command,
        targets=list(hosts),
        async_=options.async_,
        forks=options.forks,
        timeout=options.timeout,
    )
