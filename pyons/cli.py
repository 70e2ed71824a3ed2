"""Defines the command-line interface for pyons.

This module uses the `click` library to expose the property store to
operators: it builds a `FactoryProperty` the same way a client would
(defaults, then the credential file, then explicit overrides) and renders the
result with `rich`, so a broken `~/ons/credential` or a missing AccessKey can
be diagnosed before a client is ever started.
"""
import json
import logging
import sys
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core import keys
from .core.errors import ONSClientError
from .core.property import FactoryProperty
from .utils.environment import default_credential_path

console = Console()

logger = logging.getLogger(__name__)

SECRET_MASK = "******"
_MILLISECOND = timedelta(milliseconds=1)


def _parse_define(ctx: click.Context, param: click.Parameter, values: Tuple[str, ...]) -> List[Tuple[str, str]]:
    """Splits repeated `-D KEY=VALUE` options into key/value pairs.

    Args:
        ctx: The click context.
        param: The option being parsed.
        values: The raw option values.

    Returns:
        A list of (key, value) tuples in command-line order.
    """
    pairs = []
    for item in values:
        if "=" not in item:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", ctx=ctx, param=param)
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise click.BadParameter(f"empty key in '{item}'", ctx=ctx, param=param)
        pairs.append((key, value))
    return pairs


def property_options(func: Callable) -> Callable:
    """Adds the options shared by every command that builds a store."""
    func = click.option(
        "-D", "--define", "overrides", multiple=True, callback=_parse_define,
        help="Set a property as KEY=VALUE after the credential file is applied. Repeatable.",
    )(func)
    func = click.option(
        "--no-credential", is_flag=True, help="Do not read any credential file.",
    )(func)
    func = click.option(
        "--credential", "credential_path", type=click.Path(dir_okay=True),
        help="Read this credential file instead of ~/ons/credential.",
    )(func)
    return func


def _build_properties(credential_path: Optional[str], no_credential: bool,
                      overrides: List[Tuple[str, str]]) -> FactoryProperty:
    """Builds a store and applies command-line overrides.

    Raises:
        ONSClientError: If an override is rejected by the store.
    """
    properties = FactoryProperty(credential_path=credential_path, load_credential=not no_credential)
    for key, value in overrides:
        if key not in keys.ALL_KEYS:
            logger.warning(f"'{key}' is not a recognized property key")
        properties.set_factory_property(key, value)
    return properties


def _safe(getter: Callable[[], Any]) -> Any:
    try:
        return getter()
    except ValueError as e:
        return f"invalid ({e})"


def resolved_view(properties: FactoryProperty) -> Dict[str, Any]:
    """Collects what the typed accessors report for a store.

    Count accessors that fail to parse are reported as an "invalid" string
    instead of aborting the whole view.

    Args:
        properties: The store to inspect.

    Returns:
        A JSON-serializable mapping from accessor name to value.
    """
    return {
        "producer_id": properties.get_producer_id(),
        "consumer_id": properties.get_consumer_id(),
        "group_id": properties.get_group_id(),
        "instance_id": properties.get_instance_id(),
        "consumer_instance_name": properties.get_consumer_instance_name(),
        "access_key": properties.get_access_key(),
        "secret_key": SECRET_MASK if properties.get_secret_key() else "",
        "name_srv_addr": properties.get_name_srv_addr(),
        "name_srv_domain": properties.get_name_srv_domain(),
        "log_path": properties.get_log_path(),
        "message_model": properties.get_message_model(),
        "ons_channel": properties.get_ons_channel().value,
        "ons_trace_switch": properties.get_ons_trace_switch(),
        "send_msg_timeout_ms": properties.get_send_msg_timeout() // _MILLISECOND,
        "suspend_time_ms": properties.get_suspend_time_millis() // _MILLISECOND,
        "send_msg_retry_times": _safe(properties.get_send_msg_retry_times),
        "consume_thread_nums": _safe(properties.get_consume_thread_nums),
        "max_msg_cache_size": _safe(properties.get_max_msg_cache_size),
        "max_msg_cache_size_in_mib": _safe(properties.get_max_msg_cache_size_in_mib),
    }


def _masked_properties(properties: FactoryProperty) -> Dict[str, str]:
    raw = properties.get_factory_properties()
    if raw.get(keys.SECRET_KEY):
        raw[keys.SECRET_KEY] = SECRET_MASK
    return raw


def _readiness_message(properties: FactoryProperty) -> str:
    channel = properties.get_ons_channel().value
    if properties.is_ready():
        return f"Ready (channel {channel})."
    missing = [k for k, v in ((keys.ACCESS_KEY, properties.get_access_key()),
                              (keys.SECRET_KEY, properties.get_secret_key())) if not v]
    return f"Not ready: channel {channel} requires {' and '.join(missing)}."


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="pyons")
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
def main(verbose: bool, debug: bool) -> None:
    """Inspect and check pyons client properties.

    Properties are resolved exactly as a client resolves them: built-in
    defaults, then the credential file, then any -D overrides.
    """
    log_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug("Debug mode enabled.")


@main.command()
@property_options
@click.option("--json", "json_output", is_flag=True, help="Output properties in JSON format.")
def show(credential_path: Optional[str], no_credential: bool, overrides: List[Tuple[str, str]],
         json_output: bool) -> None:
    """Show raw properties and the values the typed accessors resolve."""
    try:
        properties = _build_properties(credential_path, no_credential, overrides)
    except ONSClientError as e:
        console.print(f"[red]Invalid property: {e.reason}[/red]")
        sys.exit(1)

    view = resolved_view(properties)
    if json_output:
        click.echo(json.dumps({
            "properties": _masked_properties(properties),
            "resolved": view,
            "ready": properties.is_ready(),
        }, indent=2))
        return

    raw_table = Table(title="Properties")
    raw_table.add_column("Key", style="cyan")
    raw_table.add_column("Value")
    for key, value in sorted(_masked_properties(properties).items()):
        raw_table.add_row(key, value)
    console.print(raw_table)

    resolved_table = Table(title="Resolved")
    resolved_table.add_column("Accessor", style="cyan")
    resolved_table.add_column("Value", style="magenta")
    for name, value in view.items():
        resolved_table.add_row(name, str(value))
    console.print(resolved_table)

    style = "green" if properties.is_ready() else "red"
    console.print(Panel(_readiness_message(properties), style=style, title="Readiness"))


@main.command()
@property_options
def check(credential_path: Optional[str], no_credential: bool, overrides: List[Tuple[str, str]]) -> None:
    """Check whether the properties are complete enough to start a client.

    Exits with a non-zero status code if a property is rejected or the
    configured channel is missing its credentials.
    """
    try:
        properties = _build_properties(credential_path, no_credential, overrides)
    except ONSClientError as e:
        console.print(f"[red]Invalid property: {e.reason}[/red]")
        sys.exit(1)

    if properties.is_ready():
        console.print(f"[green]{_readiness_message(properties)}[/green]")
    else:
        console.print(f"[red]{_readiness_message(properties)}[/red]")
        sys.exit(1)


@main.command()
def path() -> None:
    """Print the location of the default credential file."""
    credential_path = default_credential_path()
    if credential_path is None:
        console.print("[yellow]No home directory available; the credential file is not used.[/yellow]")
        sys.exit(1)
    state = "present" if credential_path.is_file() else "absent"
    click.echo(f"{credential_path} ({state})")


if __name__ == "__main__":
    main()
