"""Interactive confirmation before dispatch.

The prompt is always answered from a terminal: when the host list was
piped on stdin, stdin is already exhausted, so the answer is read from the
controlling terminal instead.
"""

import sys
from contextlib import contextmanager
from typing import Generator, Sequence, TextIO

import click

from .errors import UserAborted
from .logging import get_logger
from .types import Options

logger = get_logger(__name__)

TTY_DEVICE = "/dev/tty"
PROMPT = "Proceed? [y/n] "


@contextmanager
def answer_stream(options: Options) -> Generator[TextIO, None, None]:
    """Yield the stream the operator's answer is read from.

    Raises:
        UserAborted: If stdin was consumed and no terminal can be opened
    """
    if options.input and not sys.stdin.isatty():
        try:
            tty = open(TTY_DEVICE)
        except OSError as e:
            raise UserAborted(
                f"Cannot open {TTY_DEVICE} for confirmation ({e}); use --yes to skip it"
            ) from e
        with tty:
            yield tty
    else:
        yield sys.stdin


def print_summary(hosts: Sequence[str], command: str, options: Options) -> None:
    """Show what is about to run, where."""
    for host in hosts:
        click.echo(host)
    click.echo("")
    click.echo(f"Command: {command}")
    click.echo(f"Hosts: {len(hosts)}  Forks: {options.forks}  Timeout: {options.timeout}s")


def ask(stream: TextIO) -> bool:
    """Prompt until the answer is y or n; end of input counts as no."""
    while True:
        click.echo(PROMPT, nl=False)
        line = stream.readline()
        if not line:
            click.echo("")
            return False
        answer = line.strip().lower()
        if answer == "y":
            return True
        if answer == "n":
            return False


def confirm(
    options: Options,
    hosts: Sequence[str],
    command: str,
    stream: TextIO | None = None,
) -> bool:
    """Ask the operator to approve the dispatch.

    Args:
        options: Run options; ``confirmed`` skips the prompt entirely
        hosts: Resolved targets
        command: Final command string
        stream: Answer stream (defaults to the terminal, see answer_stream)

    Returns:
        True to proceed, False to abort
    """
    if options.confirmed:
        return True

    print_summary(hosts, command, options)

    if stream is not None:
        proceed = ask(stream)
    else:
        with answer_stream(options) as tty:
            proceed = ask(tty)

    logger.info("Confirmation answered", proceed=proceed)
    return proceed
