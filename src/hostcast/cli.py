"""Command-line interface for hostcast."""

import json
import logging
from typing import Optional, Sequence

import click

from hostcast import __version__
from hostcast.config import Config, load_config
from hostcast.confirm import confirm
from hostcast.dispatch import build, build_command
from hostcast.errors import HostcastError, TransportEmpty, UserAborted
from hostcast.inventory import InventoryClient
from hostcast.logging import (
    configure_logging,
    get_level_from_name,
    get_level_from_verbosity,
    get_logger,
)
from hostcast.render import render, render_json
from hostcast.resolver import resolve
from hostcast.selector import normalize, parse_selector
from hostcast.transport import Transport
from hostcast.types import DispatchResult, Options

logger = get_logger("hostcast.cli")


def to_click_error(error: HostcastError) -> click.ClickException:
    """Wrap a hostcast error so click exits with its status."""
    exc = click.ClickException(str(error))
    exc.exit_code = error.exit_code
    return exc


def run(options: Options, words: Sequence[str], config: Config) -> None:
    """Resolve, confirm, dispatch and report one command.

    Raises:
        HostcastError: EmptyHostSet, UserAborted or InventoryError end the
            run before anything is dispatched
    """
    command = build_command(words, options.passthrough)

    if options.input:
        hosts = resolve(options)
    else:
        with InventoryClient(
            config.inventory_url,
            auth=config.auth,
            timeout=config.inventory_timeout,
        ) as client:
            hosts = resolve(options, client)

    request = build(options, hosts, command)

    if options.dry_run:
        click.echo(json.dumps(request.to_wire(), indent=2))
        return

    if not confirm(options, hosts, command):
        raise UserAborted()

    try:
        result = Transport(config.transport_command).send(request)
    except TransportEmpty as e:
        logger.warning(str(e))
        result = DispatchResult()

    if options.output_format == "json":
        click.echo(render_json(result, options))
    else:
        render(result, options)


@click.command(context_settings={"allow_interspersed_args": False})
@click.argument("command", nargs=-1)
@click.option("-s", "--selector", default=None,
              help="Inventory selector, e.g. 'status:allocated pool:web'")
@click.option("-i", "--input", "input_", is_flag=True,
              help="Read target hosts from stdin, one per line")
@click.option("-f", "--forks", type=int, default=None,
              help="Hosts contacted concurrently by the backend (default from config: 10)")
@click.option("-t", "--timeout", type=int, default=None,
              help="Command timeout in seconds (default from config: 300)")
@click.option("-a", "--async", "async_", is_flag=True,
              help="Run the command asynchronously on the backend")
@click.option("-p", "--pass", "passthrough", is_flag=True,
              help="Pass the command through unescaped")
@click.option("-o", "--oneline", is_flag=True,
              help="One line per host for unstructured results")
@click.option("-y", "--yes", is_flag=True, help="Skip the confirmation prompt")
@click.option("-v", "--verbose", count=True,
              help="Full hostnames; repeat for more logging: -vv=info, -vvv=debug, -vvvv=trace")
@click.option("--dry-run", is_flag=True, help="Print the request instead of sending it")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default="text", help="Output format (default: text)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Config file (default: $HOSTCAST_CONFIG or ~/.hostcast/config.yml)")
@click.option("--log-level", type=click.Choice(["trace", "debug", "info", "warning", "error"]),
              default=None, help="Set log level explicitly (overrides -v)")
@click.option("--log-file", type=click.Path(), default=None,
              help="Write logs to file (in addition to stderr)")
@click.version_option(__version__, prog_name="hostcast")
def cli(
    command: tuple[str, ...],
    selector: Optional[str],
    input_: bool,
    forks: Optional[int],
    timeout: Optional[int],
    async_: bool,
    passthrough: bool,
    oneline: bool,
    yes: bool,
    verbose: int,
    dry_run: bool,
    output_format: str,
    config_path: Optional[str],
    log_level: Optional[str],
    log_file: Optional[str],
) -> None:
    """Run COMMAND on every host matched by a selector or listed on stdin.

    Exit status: 2 usage error, 3 no hosts matched, 4 declined at the
    prompt, 5 inventory failure. A run without results still exits 0.

    Examples:
        hostcast -s "status:allocated pool:web" uptime

        hostcast -s "nodeclass:db memory_size_total:64gb" -f 20 -t 60 -- df -h /

        hostcast -s "tag:M0001234" -p "ls /var/log | wc -l"

        grep -v '^db' hosts.txt | hostcast -i -o -- systemctl is-active nginx

        hostcast -s "createdafter:2024-01-01" --dry-run hostname
    """
    if log_level:
        level = get_level_from_name(log_level)
    else:
        level = get_level_from_verbosity(max(verbose - 1, 0))

    configure_logging(
        level=logging.CRITICAL if output_format == "json" else level,
        log_file=log_file,
        file_level=level if log_file else None,
    )

    if not selector and not input_:
        raise click.UsageError("Either --selector or --input is required")
    if not command:
        raise click.UsageError("Missing COMMAND to run")

    try:
        config = load_config(config_path)

        forks = config.forks if forks is None else forks
        timeout = config.timeout if timeout is None else timeout
        if forks < 1:
            raise click.BadParameter("must be at least 1", param_hint="--forks")
        if timeout < 1:
            raise click.BadParameter("must be at least 1 second", param_hint="--timeout")

        options = Options(
            verbose=verbose > 0,
            passthrough=passthrough,
            async_=async_,
            forks=forks,
            timeout=timeout,
            input=input_,
            oneline=oneline,
            confirmed=yes,
            dry_run=dry_run,
            output_format=output_format,
        )
        if not input_:
            options.selector = normalize(parse_selector(selector), config.selector_defaults)
            logger.debug("Normalized selector", selector=options.selector)

        run(options, command, config)
    except HostcastError as e:
        raise to_click_error(e) from e


def main() -> None:
    """Console script entry point."""
    cli()
