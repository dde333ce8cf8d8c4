"""Type definitions for hostcast.

Dataclasses for the values that flow through a single run: the resolved
options, the batch request handed to the execution backend, and the
per-host result variants decoded from the backend's reply.
"""

from dataclasses import dataclass, field
from typing import Any

# The one remote capability hostcast drives: func's command.run
COMMAND_MODULE = "command"
COMMAND_METHOD = "run"

# Defaults mirror safe fan-out for a shared backend
DEFAULT_FORKS = 10
DEFAULT_TIMEOUT = 300

CLIENT_SEPARATOR = ";"

# A Selector is a plain ordered mapping of canonical field -> value
Selector = dict[str, Any]


@dataclass
class Options:
    """Resolved options for one run, assembled from flags and config.

    Attributes:
        verbose: Show full hostnames in the report
        passthrough: Send the command words unescaped
        async_: Ask the backend to run the command asynchronously
        forks: Maximum hosts the backend contacts concurrently
        timeout: Per-command timeout in seconds, enforced by the backend
        input: Read target hosts from stdin instead of the inventory
        oneline: Compact ``host(code) summary`` output for opaque results
        selector: Normalized inventory selector
        confirmed: Skip the interactive confirmation
        dry_run: Print the wire request instead of sending it
        output_format: "text" or "json"

    Example:
        >>> opts = Options(selector={"status": "allocated"}, confirmed=True)
        >>> opts.forks
        10
    """

    verbose: bool = False
    passthrough: bool = False
    async_: bool = False
    forks: int = DEFAULT_FORKS
    timeout: int = DEFAULT_TIMEOUT
    input: bool = False
    oneline: bool = False
    selector: Selector = field(default_factory=dict)
    confirmed: bool = False
    dry_run: bool = False
    output_format: str = "text"

    def describe_source(self) -> str:
        """Describe where hosts come from, for messages."""
        if self.input:
            return "stdin"
        return " ".join(f"{k}:{v}" for k, v in self.selector.items())


@dataclass
class DispatchRequest:
    """A batch command request for the remote execution backend.

    Attributes:
        command: Shell command string, already escaped (or passed through)
        targets: Hostnames to run on, never empty
        async_: Run asynchronously on the backend
        forks: Backend fan-out
        timeout: Backend-enforced timeout in seconds
        module: Remote capability group
        method: Remote operation
    """

    command: str
    targets: list[str]
    async_: bool = False
    forks: int = DEFAULT_FORKS
    timeout: int = DEFAULT_TIMEOUT
    module: str = COMMAND_MODULE
    method: str = COMMAND_METHOD

    def __post_init__(self) -> None:
        if self.forks < 1:
            raise ValueError(f"forks must be at least 1 (got {self.forks})")
        if self.timeout < 1:
            raise ValueError(f"timeout must be at least 1 second (got {self.timeout})")

    @property
    def clients(self) -> str:
        """Targets in the backend's ``;``-joined client list encoding."""
        return CLIENT_SEPARATOR.join(self.targets)

    def to_wire(self) -> dict[str, Any]:
        """Convert to the flat structure the backend reads on stdin."""
        return {
            "async": self.async_,
            "nforks": self.forks,
            "timeout": self.timeout,
            "module": self.module,
            "method": self.method,
            "parameters": self.command,
            "clients": self.clients,
        }


@dataclass(frozen=True)
class StructuredResult:
    """A command run that reported (exit code, stdout, stderr)."""

    code: Any
    primary: str
    secondary: str

    @property
    def output(self) -> str:
        return f"{self.primary}{self.secondary}"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "stdout": self.primary, "stderr": self.secondary}


@dataclass(frozen=True)
class OpaqueResult:
    """Any other per-host payload (remote exceptions, connection failures).

    Attributes:
        raw: The decoded value exactly as the backend sent it
        text: Its plain textual representation
    """

    raw: Any
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"raw": self.raw}


HostResult = StructuredResult | OpaqueResult


@dataclass
class DispatchResult:
    """Decoded backend reply.

    Attributes:
        hosts: hostname -> result, in the order the backend sent them
        job_id: Job handle when an async request returned no host results
    """

    hosts: dict[str, HostResult] = field(default_factory=dict)
    job_id: str | None = None

    def __len__(self) -> int:
        return len(self.hosts)

    @property
    def is_empty(self) -> bool:
        return not self.hosts and self.job_id is None
