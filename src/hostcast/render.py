"""Per-host result rendering.

Text output, per host in backend order:
- Structured results print ``host: code`` followed by stdout+stderr verbatim
- Opaque results print ``host: <value>``, or ``host(code) summary`` in
  one-line mode

Hostnames are shortened to their first label unless verbose. Rendering
never fails on an unexpected payload; it falls back to the value's text.
"""

import json
from typing import Any

from rich.console import Console

from .types import DispatchResult, OpaqueResult, Options, StructuredResult

NO_RESULTS = "No results"


def short_name(host: str, verbose: bool = False) -> str:
    """``web01.dc1.example.com`` -> ``web01`` unless verbose."""
    if verbose:
        return host
    return host.split(".", 1)[0]


def _first_line(value: Any) -> str:
    text = value if isinstance(value, str) else str(value)
    lines = text.splitlines()
    return lines[0] if lines else ""


def oneline_fields(result: OpaqueResult) -> tuple[Any, str]:
    """Exit-code-like value and one-line summary of an opaque result.

    The first element is taken as the code and the first line of the
    second as the summary. Values that are not sequences report ``?``
    and the first line of their text.
    """
    raw = result.raw
    if isinstance(raw, (list, tuple)) and raw:
        summary = _first_line(raw[1]) if len(raw) > 1 else ""
        return raw[0], summary
    return "?", _first_line(result.text)


def write_verbatim(console: Console, text: str) -> None:
    """Write remote output unchanged, ending with a newline.

    Bypasses rich rendering, which would expand tabs and drop control
    characters such as carriage returns.
    """
    if not text.endswith("\n"):
        text += "\n"
    console.file.write(text)
    console.file.flush()


def _code_style(code: Any) -> str:
    return "bold" if code in (0, "0") else "bold red"


def render(result: DispatchResult, options: Options, console: Console | None = None) -> None:
    """Print the report for a dispatch result.

    Args:
        result: Decoded backend reply (not modified)
        options: Run options (verbose, oneline)
        console: Output console, stdout by default
    """
    console = console or Console(highlight=False)

    if result.job_id is not None and not result.hosts:
        console.out(f"Job submitted: {result.job_id}", highlight=False)
        return
    if not result.hosts:
        console.out(NO_RESULTS, highlight=False)
        return

    for host, host_result in result.hosts.items():
        name = short_name(host, options.verbose)

        if isinstance(host_result, StructuredResult):
            console.out(
                f"{name}: {host_result.code}",
                style=_code_style(host_result.code),
                highlight=False,
            )
            output = host_result.output
            if output:
                write_verbatim(console, output)
        elif options.oneline:
            code, summary = oneline_fields(host_result)
            line = f"{name}({code}) {summary}".rstrip()
            console.out(line, style=_code_style(code), highlight=False)
        else:
            write_verbatim(console, f"{name}: {host_result.text}")


def render_json(result: DispatchResult, options: Options) -> str:
    """Format a dispatch result as JSON.

    Returns:
        JSON document with ``count``, ``job_id`` and ``results`` keyed by
        full hostname; each entry has the display ``name``, structured
        results carry code/stdout/stderr, opaque ones ``raw``
    """
    hosts: dict[str, Any] = {}
    for host, host_result in result.hosts.items():
        entry = {"name": short_name(host, options.verbose)}
        entry.update(host_result.to_dict())
        entry["structured"] = isinstance(host_result, StructuredResult)
        hosts[host] = entry

    output = {
        "count": len(hosts),
        "job_id": result.job_id,
        "results": hosts,
    }
    return json.dumps(output, indent=2, default=str)
