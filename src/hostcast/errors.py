"""hostcast exceptions.

Every error carries the process exit status the CLI should terminate with,
so the command line layer can turn any of them into a ``click`` error
without a lookup table.
"""


class HostcastError(Exception):
    """Base class for hostcast errors.

    Attributes:
        msg: Human-readable error message
        exit_code: Process exit status for this error
    """

    exit_code = 1

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg

    def __str__(self) -> str:
        return self.msg


class SelectorSyntaxError(HostcastError):
    """Raised when a selector expression token is not ``key:value``."""

    exit_code = 2


class ConfigError(HostcastError):
    """Raised when the configuration file cannot be parsed."""

    exit_code = 2


class EmptyHostSet(HostcastError):
    """Raised when host resolution yields no targets.

    Example:
        raise EmptyHostSet("status:allocated pool:web")
        # "No hosts matched selector: status:allocated pool:web"
    """

    exit_code = 3

    def __init__(self, source: str) -> None:
        super().__init__(f"No hosts matched selector: {source}")
        self.source = source


class UserAborted(HostcastError):
    """Raised when the operator declines the confirmation prompt."""

    exit_code = 4

    def __init__(self, msg: str = "Aborted by user") -> None:
        super().__init__(msg)


class InventoryError(HostcastError):
    """Raised when the inventory service cannot be queried."""

    exit_code = 5


class TransportEmpty(HostcastError):
    """Raised when the execution backend produced no parseable output.

    Not fatal: the run is reported as having no results.
    """

    exit_code = 0
