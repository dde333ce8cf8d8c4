"""Transport adapter for the remote execution backend.

The backend is a func-style ``transmit`` program: it reads one JSON
request on stdin and writes one JSON reply on stdout, a mapping of
hostname to that host's result. A successful command run reports
``[exit_code, stdout, stderr]``; connection failures and remote exceptions
come back in other shapes. The shape is inspected once here and turned
into StructuredResult or OpaqueResult.
"""

import json
import subprocess
from typing import Any, Sequence

from .errors import TransportEmpty
from .logging import get_logger
from .types import DispatchRequest, DispatchResult, HostResult, OpaqueResult, StructuredResult

logger = get_logger(__name__)

DEFAULT_COMMAND = ("func-transmit", "--json")

# Extra seconds allowed for the backend to report after its own timeout
TIMEOUT_GRACE = 30


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def decode_host_result(value: Any) -> HostResult:
    """Classify one host's payload.

    Example:
        >>> decode_host_result([0, "up 3 days\\n", ""])
        StructuredResult(code=0, primary='up 3 days\\n', secondary='')
        >>> decode_host_result(["REMOTE_ERROR", "socket.error"])
        OpaqueResult(raw=['REMOTE_ERROR', 'socket.error'], text="['REMOTE_ERROR', 'socket.error']")
    """
    if isinstance(value, (list, tuple)) and len(value) == 3:
        code, primary, secondary = value
        return StructuredResult(code=code, primary=_text(primary), secondary=_text(secondary))
    return OpaqueResult(raw=value, text=_text(value))


def decode_result(payload: Any) -> DispatchResult:
    """Convert a decoded backend reply into a DispatchResult.

    A mapping is a per-host reply. A bare string or number is the job id
    an async request answers with.

    Raises:
        TransportEmpty: If the payload is neither
    """
    if isinstance(payload, dict):
        return DispatchResult(
            hosts={str(host): decode_host_result(value) for host, value in payload.items()}
        )
    if isinstance(payload, (str, int)) and not isinstance(payload, bool) and payload != "":
        return DispatchResult(job_id=str(payload))
    raise TransportEmpty(f"Unexpected reply from execution backend: {payload!r:.100}")


class Transport:
    """Single-shot request/response exchange with the backend process.

    Attributes:
        command: Backend argv
        grace: Seconds to wait beyond the request timeout before giving up

    Example:
        >>> transport = Transport(["func-transmit", "--json"])
        >>> result = transport.send(request)
    """

    def __init__(self, command: Sequence[str] = DEFAULT_COMMAND, grace: int = TIMEOUT_GRACE) -> None:
        self.command = list(command)
        self.grace = grace

    def send(self, request: DispatchRequest) -> DispatchResult:
        """Send a request and wait for the complete reply.

        Raises:
            TransportEmpty: If the backend could not be run, timed out, or
                produced no parseable reply
        """
        if not request.targets:
            raise ValueError("Refusing to send a request without targets")

        wire = json.dumps(request.to_wire())
        logger.info("Sending request", backend=self.command[0], hosts=len(request.targets))
        logger.trace(f"Request payload: {wire}")

        with logger.performance("Dispatch", hosts=len(request.targets)):
            stdout = self._exchange(wire, request.timeout + self.grace)

        if not stdout.strip():
            raise TransportEmpty("Execution backend returned no output")

        try:
            payload = json.loads(stdout)
        except json.JSONDecodeError as e:
            logger.debug(f"Unparseable reply: {stdout[:200]!r}")
            raise TransportEmpty(f"Execution backend returned invalid JSON: {e}") from e

        return decode_result(payload)

    def _exchange(self, wire: str, wait: int) -> str:
        """Run the backend with the request on stdin and return its stdout."""
        try:
            process = subprocess.run(
                self.command,
                input=wire,
                capture_output=True,
                text=True,
                timeout=wait,
            )
        except FileNotFoundError as e:
            raise TransportEmpty(f"Execution backend not found: {self.command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise TransportEmpty(f"Execution backend did not answer within {wait}s") from e

        if process.returncode != 0:
            logger.warning(
                "Execution backend exited with an error",
                rc=process.returncode,
                stderr=process.stderr.strip()[:200],
            )
        return process.stdout
