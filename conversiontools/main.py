"""Command line entry point for the Conversion Tools client."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from conversiontools.core.client import ConversionToolsClient
from conversiontools.core.errors import ConversionToolsError, RateLimitError
from conversiontools.core.models import ConversionProgressEvent, ProgressEvent, RateLimits
from conversiontools.core.secrets import delete_token, save_token
from conversiontools.core.settings import ClientConfig

console = Console(stderr=True)
out = Console()


def parse_option(raw: str) -> tuple[str, Any]:
    """Parse ``key=value``; the value is read as JSON when it parses, else kept as text."""
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Expected key=value, got {raw!r}")
    key, value = raw.split("=", 1)
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="conversiontools", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="store an API token in the system keyring")
    login.add_argument("token")
    sub.add_parser("logout", help="remove the stored API token")

    convert = sub.add_parser("convert", help="run a conversion")
    convert.add_argument("type", help="conversion type, e.g. convert.xml_to_csv")
    convert.add_argument("input", help="local path, URL (with --url) or file id (with --file-id)")
    source = convert.add_mutually_exclusive_group()
    source.add_argument("--url", action="store_true", help="treat input as a URL")
    source.add_argument("--file-id", action="store_true", help="treat input as an uploaded file id")
    convert.add_argument("-o", "--output", help="output path")
    convert.add_argument(
        "-O", "--option", action="append", type=parse_option, default=[], metavar="KEY=VALUE"
    )
    convert.add_argument("--sandbox", action="store_true", help="run without consuming quota")
    convert.add_argument("--no-wait", action="store_true", help="print the task id and exit")
    convert.add_argument("--callback-url")
    convert.add_argument("--timeout", type=float, help="give up waiting after this many seconds")

    status = sub.add_parser("status", help="show a task's status")
    status.add_argument("task_id")

    tasks = sub.add_parser("tasks", help="list tasks")
    tasks.add_argument("--status", choices=["PENDING", "RUNNING", "SUCCESS", "ERROR"])

    sub.add_parser("user", help="show the account for the current token")
    sub.add_parser("conversions", help="list conversion types offered by the API")
    return parser


def _print_progress(event: ProgressEvent) -> None:
    if isinstance(event, ConversionProgressEvent):
        console.print(f"[cyan]{event.status.value}[/cyan] {event.percent}%")
    elif event.percent is not None:
        console.print(f"[dim]{event.loaded} bytes ({event.percent}%)[/dim]")


def _print_rate_limits(limits: Optional[RateLimits]) -> None:
    if limits is None:
        return
    if limits.daily:
        console.print(f"[dim]Daily tasks left: {limits.daily.remaining}/{limits.daily.limit}[/dim]")
    if limits.monthly:
        console.print(
            f"[dim]Monthly tasks left: {limits.monthly.remaining}/{limits.monthly.limit}[/dim]"
        )


async def run_command(args: argparse.Namespace, config: ClientConfig) -> int:
    async with ConversionToolsClient(config) as client:
        if args.command == "convert":
            options: Dict[str, Any] = dict(args.option)
            if args.sandbox:
                options["sandbox"] = True
            if args.url:
                source: Any = {"url": args.input}
            elif args.file_id:
                source = {"file_id": args.input}
            else:
                source = args.input
            result = await client.convert(
                args.type,
                source,
                output=args.output,
                options=options,
                wait=not args.no_wait,
                callback_url=args.callback_url,
                polling={"timeout": args.timeout} if args.timeout else None,
            )
            out.print(result)
            _print_rate_limits(client.get_rate_limits())

        elif args.command == "status":
            task = await client.get_task(args.task_id)
            table = Table(title="Task", box=box.ROUNDED, show_header=False)
            table.add_column("Field", style="cyan")
            table.add_column("Value")
            for key, value in task.to_dict().items():
                table.add_row(key, "" if value is None else str(value))
            out.print(table)

        elif args.command == "tasks":
            table = Table(title="Tasks", box=box.ROUNDED)
            for column in ("ID", "Type", "Status", "Progress", "Created"):
                table.add_column(column)
            for detail in await client.tasks.list(args.status):
                table.add_row(
                    detail.id,
                    detail.type,
                    detail.status.value,
                    f"{detail.conversion_progress}%",
                    detail.date_created or "",
                )
            out.print(table)

        elif args.command == "user":
            user = await client.get_user()
            out.print(user.email)
            _print_rate_limits(client.get_rate_limits())

        elif args.command == "conversions":
            api_config = await client.get_config()
            table = Table(title="Conversions", box=box.ROUNDED)
            table.add_column("Type", style="cyan")
            table.add_column("Title")
            table.add_column("Options", style="dim")
            for conversion in api_config.conversions:
                table.add_row(conversion.type, conversion.title, ", ".join(conversion.options))
            out.print(table)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Parse arguments and run one command."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "login":
        save_token(args.token)
        console.print("[green]Token saved.[/green]")
        return
    if args.command == "logout":
        if delete_token():
            console.print("[green]Token removed.[/green]")
        else:
            console.print("[yellow]No token was stored.[/yellow]")
        return

    config = ClientConfig.from_env(
        on_upload_progress=_print_progress,
        on_download_progress=_print_progress,
        on_conversion_progress=_print_progress,
    )
    try:
        sys.exit(asyncio.run(run_command(args, config)))
    except RateLimitError as exc:
        console.print(f"[bold red]Rate limit exceeded:[/bold red] {exc}")
        _print_rate_limits(exc.limits)
        sys.exit(1)
    except ConversionToolsError as exc:
        console.print(f"[bold red]{exc.code}:[/bold red] {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
