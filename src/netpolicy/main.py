"""
netpolicy command line interface.

Reads policies from the policy service, applies one edit through a
PolicyEditor, waits for the write-back and prints the result.
"""

import logging
import re
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from netpolicy.authority import AuthorityError, PolicyServiceClient
from netpolicy.authority.config import config
from netpolicy.policy import (
    LIMIT_DISABLED,
    MatchRule,
    NetworkTemplate,
    PolicyEditor,
    PolicyEditorError,
    TransportError,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

console = Console()

_UNITS = {"": 1, "K": 1024, "M": 1024 ** 2, "G": 1024 ** 3, "T": 1024 ** 4}
_BYTES_PATTERN = re.compile(r"^(\d+)\s*([KMGT]?)B?$", re.IGNORECASE)


def parse_bytes(value: str) -> int:
    """
    Parse a byte threshold such as "500M", "2GB", "1048576" or "off".
    Units are binary (1K = 1024).

    Returns:
        Byte count, or -1 for a disabled threshold

    Raises:
        click.BadParameter: If the value cannot be parsed
    """
    text = value.strip()
    if text.lower() in ("off", "disabled", "none"):
        return LIMIT_DISABLED

    match = _BYTES_PATTERN.match(text)
    if not match:
        raise click.BadParameter(f"Not a byte size: {value}")

    number, unit = match.groups()
    return int(number) * _UNITS[unit.upper()]


def format_bytes(value: int) -> str:
    if value == LIMIT_DISABLED:
        return "disabled"
    for unit in ("T", "G", "M", "K"):
        size = _UNITS[unit]
        if value >= size and value % size == 0:
            return f"{value // size}{unit}B"
    return f"{value}B"


class PolicyController:
    """Owns the service client and editor for one CLI invocation."""

    def __init__(self, base_url: Optional[str] = None, subscriber_id: Optional[str] = None):
        self.subscriber_id = subscriber_id or config.default_subscriber_id
        self.client = PolicyServiceClient(base_url=base_url)
        self.editor = PolicyEditor(self.client)

    def template(self, rule: str) -> NetworkTemplate:
        match_rule = MatchRule(rule)
        subscriber_id = self.subscriber_id if match_rule.is_mobile else None
        return NetworkTemplate(match_rule=match_rule, subscriber_id=subscriber_id)

    def finish(self) -> None:
        """
        Wait for background writes and print the cache.

        Raises:
            TransportError: If a write timed out or the service rejected it
        """
        if not self.editor.wait_for_pending_writes(timeout=config.timeout_seconds * 2):
            raise TransportError("timed out waiting for policy write")

        errors = self.editor.write_errors()
        if errors:
            raise errors[0]

        self.editor.close()
        print_policies(self.editor)


def print_policies(editor: PolicyEditor) -> None:
    policies = editor.policies
    if not policies:
        console.print("[yellow]No policies found[/yellow]")
        return

    table = Table(title=f"Network Policies ({len(policies)})")
    table.add_column("Match Rule", style="cyan")
    table.add_column("Subscriber", style="green")
    table.add_column("Cycle Day", style="yellow")
    table.add_column("Warning", style="magenta")
    table.add_column("Limit", style="red")

    for policy in policies:
        table.add_row(
            policy.template.match_rule.value,
            policy.template.subscriber_id or "-",
            str(policy.cycle_day),
            format_bytes(policy.warning_bytes),
            format_bytes(policy.limit_bytes),
        )

    console.print(table)


def _run(ctx: click.Context, action) -> None:
    """Read, apply an action, then report. Exits non-zero on failure."""
    controller: PolicyController = ctx.obj["controller"]
    try:
        controller.editor.read()
        action(controller)
        controller.finish()
    except (PolicyEditorError, AuthorityError, ValueError) as e:
        controller.editor.close()
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(1)


RULE_CHOICE = click.Choice([rule.value for rule in MatchRule], case_sensitive=False)


@click.group()
@click.option("--url", "-u", help="Policy service base URL (default: from config)")
@click.option("--subscriber", "-s", help="Subscriber ID for mobile templates")
@click.pass_context
def cli(ctx, url, subscriber):
    """Network policy editor CLI"""
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj["controller"] = PolicyController(url, subscriber)


@cli.command("list")
@click.pass_context
def list_policies(ctx):
    """Show all policies."""
    _run(ctx, lambda controller: None)


@cli.command()
@click.pass_context
def status(ctx):
    """Show whether mobile data is split into 3G and 4G policies."""

    def action(controller: PolicyController) -> None:
        split = controller.editor.is_mobile_policy_split(controller.subscriber_id)
        label = "split (3G / 4G)" if split else "combined"
        subscriber = escape(controller.subscriber_id or "<none>")
        console.print(f"[blue]Mobile policy for {subscriber}: {label}[/blue]")

    _run(ctx, action)


@cli.command()
@click.pass_context
def split(ctx):
    """Split the combined mobile policy into 3G and 4G policies."""
    _run(ctx, lambda controller: controller.editor.set_mobile_policy_split(controller.subscriber_id, True))


@cli.command()
@click.pass_context
def combine(ctx):
    """Merge 3G and 4G policies into one, keeping the more restrictive values."""
    _run(ctx, lambda controller: controller.editor.set_mobile_policy_split(controller.subscriber_id, False))


@cli.command("set-cycle-day")
@click.argument("rule", type=RULE_CHOICE)
@click.argument("day", type=click.IntRange(1, 31))
@click.pass_context
def set_cycle_day(ctx, rule, day):
    """Set the billing cycle start day for a template."""
    _run(ctx, lambda controller: controller.editor.set_policy_cycle_day(
        controller.template(rule.upper()), day))


@cli.command("set-warning")
@click.argument("rule", type=RULE_CHOICE)
@click.argument("size")
@click.pass_context
def set_warning(ctx, rule, size):
    """Set the warning threshold (e.g. 1536M, 2G, or 'off')."""
    warning_bytes = parse_bytes(size)
    _run(ctx, lambda controller: controller.editor.set_policy_warning_bytes(
        controller.template(rule.upper()), warning_bytes))


@cli.command("set-limit")
@click.argument("rule", type=RULE_CHOICE)
@click.argument("size")
@click.pass_context
def set_limit(ctx, rule, size):
    """Set the data limit (e.g. 2G, 500M, or 'off')."""
    limit_bytes = parse_bytes(size)
    _run(ctx, lambda controller: controller.editor.set_policy_limit_bytes(
        controller.template(rule.upper()), limit_bytes))


def main():
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
