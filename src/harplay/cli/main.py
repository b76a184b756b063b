"""harplay CLI - inspect, summarize and replay HAR captures.

Every command reads the capture from disk, so the CLI keeps no state
between invocations. Selection is by entry index as shown by ``list``.
"""

import asyncio
import os
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

import harplay
from harplay import console as hp_console
from harplay.config import LogFormat, get_settings
from harplay.exceptions import EntryNotFoundError, ParseError, ReplayError
from harplay.har.aggregate import max_time, summarize, timing_breakdown
from harplay.har.content import Classification, classify, classify_content, classify_post_data
from harplay.har.export import dumps_export, export_filename, to_export_document
from harplay.har.index import ALL, EntryFilter, filter_entries, get_entry, url_host, url_path
from harplay.har.model import Capture, Entry, Header
from harplay.har.parser import parse_har_file
from harplay.logging import configure_logging, enable_network_debug, get_logger
from harplay.replay.edit import EditedRequest, parse_header_block
from harplay.replay.engine import Replayer, ReplayResult

# Configure logging early using env vars directly; main_callback() reconfigures
# from settings and -v/-vv / --log-format once options are parsed.
configure_logging(
    level=os.environ.get("HARPLAY_LOG_LEVEL", "WARNING"),
    json_output=os.environ.get("HARPLAY_LOG_FORMAT", "console") == "json",
)

LOG = get_logger(__name__)

app = typer.Typer(
    name="harplay",
    help="""
    harplay - inspect, summarize and replay HAR captures

    \b
    Quick start:
      harplay summary capture.har        Totals and distributions
      harplay list capture.har -m POST   Filtered entry list
      harplay show capture.har 3         Request/response of entry 3
      harplay replay capture.har 3       Re-send entry 3 to its origin
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()

HarFileArg = Annotated[
    Path,
    typer.Argument(
        help="Path to HAR file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]
IndexArg = Annotated[int, typer.Argument(help="Entry index (see 'harplay list')")]

BAR_WIDTH = 20


class StatusOption(StrEnum):
    """Values accepted by 'list --status'."""

    ALL = "all"
    SUCCESS = "2xx"
    REDIRECT = "3xx"
    CLIENT_ERROR = "4xx"
    SERVER_ERROR = "5xx"


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for info, -vv for debug)",
        ),
    ] = 0,
    log_format: Annotated[
        LogFormat | None,
        typer.Option(
            "--log-format",
            help="Log output format: console (human-readable) or json (structured)",
        ),
    ] = None,
    network_debug: Annotated[
        bool,
        typer.Option(
            "--network-debug",
            help="Enable HTTP transport debug logging (httpx, httpcore)",
        ),
    ] = False,
) -> None:
    """harplay - inspect, summarize and replay HAR captures."""
    settings = get_settings()
    json_output = (log_format or settings.log_format) == LogFormat.JSON

    level = settings.log_level
    if verbose >= 2:
        level = "DEBUG"
    elif verbose >= 1:
        level = "INFO"
    configure_logging(level=level, json_output=json_output)

    if network_debug:
        enable_network_debug()


def _load_capture(har_file: Path) -> Capture:
    """Parse har_file or exit with a readable error."""
    try:
        capture = parse_har_file(har_file)
    except ParseError as exc:
        hp_console.error(f"Failed to parse HAR file ({exc.kind}): {escape(str(exc))}")
        raise typer.Exit(1) from None
    except FileNotFoundError:
        hp_console.error(f"File not found: {escape(str(har_file))}")
        raise typer.Exit(1) from None

    if capture.has_errors:
        hp_console.warn(f"{len(capture.errors)} entries could not be read and were skipped")
        for error in capture.errors[:3]:
            hp_console.info(f"Entry {error.index}: {escape(error.error)}")
    return capture


def _load_entry(har_file: Path, index: int) -> Entry:
    capture = _load_capture(har_file)
    try:
        return get_entry(capture, index)
    except EntryNotFoundError as exc:
        hp_console.error(escape(str(exc)))
        raise typer.Exit(1) from None


def _bar(fraction: float, width: int = BAR_WIDTH) -> str:
    filled = round(max(0.0, min(fraction, 1.0)) * width)
    return "█" * filled + "[dim]" + "░" * (width - filled) + "[/dim]"


def _headers_table(title: str, headers: tuple[Header, ...] | list[Header]) -> Table:
    table = Table(title=title, title_style="bold", header_style="bold cyan", border_style="dim")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Value", style="white", overflow="fold")
    for header in headers:
        table.add_row(escape(header.name), escape(header.value))
    return table


def _print_body(classification: Classification, title: str) -> None:
    if not classification.has_content:
        console.print(f"[dim]{title}: no content[/dim]")
        return
    console.print(
        Panel(
            Syntax(classification.text or "", classification.language, word_wrap=True),
            title=f"{title} [dim]({escape(classification.language)})[/dim]",
            border_style="dim",
        )
    )


@app.command("summary")
def summary_command(
    har_file: HarFileArg,
    json_output: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
) -> None:
    """Show totals, timing extremes and distributions for a capture."""
    capture = _load_capture(har_file)
    result = summarize(capture.entries, top_content_types=get_settings().top_content_types)

    if json_output:
        hp_console.print_json(result.to_dict())
        return

    lines = [
        f"[dim]Creator:[/dim]        {escape(capture.creator.name)} {escape(capture.creator.version)}".rstrip(),
        f"[dim]Requests:[/dim]       {result.total_count}",
        f"[dim]Body bytes:[/dim]     {result.total_body_bytes}",
        f"[dim]Average time:[/dim]   {result.average_time:.2f}ms",
    ]
    if result.slowest is not None:
        lines.append(
            f"[dim]Slowest:[/dim]        #{result.slowest.index} "
            f"{escape(result.slowest.request.method)} {escape(url_path(result.slowest.request.url))} "
            f"({result.slowest.time:.2f}ms)"
        )
    if result.fastest is not None:
        lines.append(
            f"[dim]Fastest:[/dim]        #{result.fastest.index} "
            f"{escape(result.fastest.request.method)} {escape(url_path(result.fastest.request.url))} "
            f"({result.fastest.time:.2f}ms)"
        )
    console.print(Panel("\n".join(lines), title=f"[cyan]{escape(har_file.name)}[/cyan]", border_style="cyan"))

    if result.total_count == 0:
        console.print("[dim]No entries in capture[/dim]")
        return

    table = Table(title="Distributions", title_style="bold", header_style="bold cyan", border_style="dim")
    table.add_column("Group", style="dim")
    table.add_column("Value", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for method, share in result.method_distribution.items():
        table.add_row("method", escape(method), str(share.count), f"{share.percentage:.1f}%")
    for bucket, share in result.status_class_distribution.items():
        table.add_row("status", str(bucket), str(share.count), f"{share.percentage:.1f}%")
    for subtype, count in result.content_type_distribution.items():
        share_pct = count * 100.0 / result.total_count
        table.add_row("content", escape(subtype), str(count), f"{share_pct:.1f}%")
    console.print(table)


@app.command("list")
def list_command(
    har_file: HarFileArg,
    search: Annotated[
        str,
        typer.Option("--search", "-s", help="Case-insensitive match on URL or method"),
    ] = "",
    method: Annotated[
        str,
        typer.Option("--method", "-m", help="Exact request method, or 'all'"),
    ] = ALL,
    status: Annotated[
        StatusOption,
        typer.Option("--status", help="Status class"),
    ] = StatusOption.ALL,
    json_output: Annotated[bool, typer.Option("--json", help="Output JSON")] = False,
) -> None:
    """List entries, optionally filtered."""
    capture = _load_capture(har_file)
    criteria = EntryFilter(search_term=search, method=method, status_class=status.value)
    entries = filter_entries(capture.entries, criteria)

    if json_output:
        hp_console.print_json(
            [
                {
                    "index": e.index,
                    "method": e.request.method,
                    "url": e.request.url,
                    "status": e.response.status,
                    "time": e.time,
                }
                for e in entries
            ]
        )
        return

    if not entries:
        console.print("[dim]No matching entries[/dim]")
        return

    # bars are scaled against the whole capture, not just the matches
    longest = max_time(capture.entries)
    table = Table(
        title=f"Requests ({len(entries)} of {len(capture.entries)})",
        title_style="bold",
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Path", style="white", overflow="fold")
    table.add_column("Host", style="dim")
    table.add_column("Status", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Waterfall", no_wrap=True)
    for e in entries:
        style = hp_console.status_style(e.response.status)
        fraction = e.time / longest if e.time and longest else 0.0
        table.add_row(
            str(e.index),
            escape(e.request.method),
            escape(url_path(e.request.url)),
            escape(url_host(e.request.url)),
            f"[{style}]{e.response.status}[/{style}]",
            f"{e.time:.2f}ms",
            _bar(fraction),
        )
    console.print(table)


@app.command("show")
def show_command(
    har_file: HarFileArg,
    index: IndexArg,
    body: Annotated[bool, typer.Option("--body/--no-body", help="Show request/response bodies")] = True,
) -> None:
    """Show the request and response of one entry."""
    entry = _load_entry(har_file, index)
    request = entry.request
    response = entry.response

    general = [
        f"[dim]URL:[/dim]          {escape(request.url)}",
        f"[dim]Method:[/dim]       {escape(request.method)}",
        f"[dim]HTTP version:[/dim] {escape(request.http_version or '-')}",
        f"[dim]Status:[/dim]       {response.status} {escape(response.status_text)}",
        f"[dim]Started:[/dim]      {escape(entry.started_date_time or '-')}",
        f"[dim]Time:[/dim]         {entry.time:.2f}ms",
    ]
    if entry.server_ip_address:
        general.append(f"[dim]Server IP:[/dim]    {escape(entry.server_ip_address)}")
    if response.redirect_url:
        general.append(f"[dim]Redirect:[/dim]     {escape(response.redirect_url)}")
    console.print(
        Panel(
            "\n".join(general),
            title=f"[cyan]#{entry.index} {escape(request.method)} {escape(url_path(request.url))}[/cyan]",
            border_style="cyan",
        )
    )

    console.print(_headers_table("Request Headers", request.headers))
    if request.query_string:
        console.print(_headers_table("Query String", request.query_string))
    if request.post_data is not None:
        console.print(f"[dim]Request body type:[/dim] {escape(request.post_data.mime_type or '-')}")
        if request.post_data.params:
            console.print(
                _headers_table(
                    "Form Parameters",
                    [Header(p.name, p.value or p.file_name or "") for p in request.post_data.params],
                )
            )
        if body:
            _print_body(classify_post_data(request.post_data), "Request Body")

    console.print(_headers_table("Response Headers", response.headers))
    if body:
        _print_body(classify_content(response.content), "Response Body")


@app.command("timings")
def timings_command(har_file: HarFileArg, index: IndexArg) -> None:
    """Show the timing breakdown of one entry."""
    entry = _load_entry(har_file, index)

    table = Table(
        title=f"Timings #{entry.index} ({entry.time:.2f}ms)",
        title_style="bold",
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Phase", style="cyan")
    table.add_column("Duration", justify="right")
    table.add_column("Share", no_wrap=True)
    for phase in timing_breakdown(entry):
        table.add_row(phase.name, f"{phase.duration:.2f}ms", _bar(phase.fraction))
    table.add_row("[bold]total[/bold]", f"[bold]{entry.time:.2f}ms[/bold]", _bar(1.0 if entry.time else 0.0))
    console.print(table)


def _resolve_body(body_arg: str) -> str:
    """Resolve a body from an inline string, ``@filename``, or ``@-`` (stdin).

    Raises:
        typer.BadParameter: If the file does not exist.
    """
    if body_arg == "@-":
        return sys.stdin.read()
    if body_arg.startswith("@"):
        filepath = Path(body_arg[1:])
        if not filepath.is_file():
            raise typer.BadParameter(f"File not found: {filepath}")
        return filepath.read_text()
    return body_arg


def _apply_header_overrides(edited: EditedRequest, overrides: list[str]) -> None:
    """Set each ``Name: value`` override, replacing same-named headers."""
    for header in parse_header_block("\n".join(overrides)):
        lowered = header.name.lower()
        edited.headers = [h for h in edited.headers if h.name.lower() != lowered]
        edited.headers.append(header)


def _print_replay_result(result: ReplayResult, *, verbose: bool) -> None:
    style = hp_console.status_style(result.status)
    hp_console.err_console.print(
        f"[{style}]HTTP {result.status}[/{style}]"
        f" [dim]{escape(result.status_text)}[/dim]"
        f" [dim]({result.elapsed_ms:.0f}ms)[/dim]"
    )
    if verbose:
        console.print(_headers_table("Response Headers", result.headers))

    content_type = next((h.value for h in result.headers if h.name.lower() == "content-type"), "")
    _print_body(classify(content_type, result.body), "Response Body")


@app.command("replay")
def replay_command(
    har_file: HarFileArg,
    index: IndexArg,
    method: Annotated[str | None, typer.Option("--method", "-X", help="Override the method")] = None,
    url: Annotated[str | None, typer.Option("--url", help="Override the URL")] = None,
    header: Annotated[
        list[str] | None,
        typer.Option("--header", "-H", help="Set header(s), format 'Name: value'"),
    ] = None,
    headers_file: Annotated[
        Path | None,
        typer.Option(
            "--headers-file",
            help="Replace all headers with 'Name: value' lines from a file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    body: Annotated[
        str | None,
        typer.Option("--body", "-d", help="Replace the body (inline, @file, @- for stdin)"),
    ] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output the result as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show response headers")] = False,
) -> None:
    """Re-send a captured request to its live origin.

    This makes a real network call to whatever host the URL names.
    """
    entry = _load_entry(har_file, index)
    edited = EditedRequest.from_request(entry.request)

    if method is not None:
        edited.method = method
    if url is not None:
        edited.url = url
    if headers_file is not None:
        edited.set_headers_text(headers_file.read_text())
    if header:
        _apply_header_overrides(edited, header)
    if body is not None:
        edited.set_body_text(_resolve_body(body))

    hp_console.warn(f"Replaying {escape(edited.method)} {escape(edited.url)} against the live host")
    if not yes and not typer.confirm("Send request?", default=True, err=True):
        raise typer.Exit(1)

    try:
        result = asyncio.run(Replayer(get_settings()).replay(edited))
    except ReplayError as exc:
        if json_output:
            hp_console.print_json(exc.to_dict())
        hp_console.error(f"Replay failed ({exc.kind}): {escape(exc.message)}")
        raise typer.Exit(1) from None

    if json_output:
        hp_console.print_json(result.to_dict())
        return
    _print_replay_result(result, verbose=verbose)


@app.command("export")
def export_command(
    har_file: HarFileArg,
    index: IndexArg,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory (default: HARPLAY_EXPORT_DIR or cwd)",
            file_okay=False,
        ),
    ] = None,
    stdout: Annotated[bool, typer.Option("--stdout", help="Print instead of writing a file")] = False,
) -> None:
    """Export one entry as a standalone JSON document."""
    entry = _load_entry(har_file, index)

    if stdout:
        hp_console.print_json(to_export_document(entry))
        return

    directory = output or get_settings().export_dir
    target = directory / export_filename(entry)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_text(dumps_export(entry), encoding="utf-8")
    except OSError as exc:
        hp_console.error(f"Failed to write export: {escape(str(exc))}")
        raise typer.Exit(1) from None

    LOG.info("entry_exported", entry_index=entry.index, path=str(target))
    hp_console.success(f"Exported entry {entry.index} to {escape(str(target))}")


@app.command("version")
def version() -> None:
    """Show harplay version."""
    console.print(f"[bold cyan]harplay[/bold cyan] v{harplay.__version__}")


@app.command("config")
def config_command() -> None:
    """Show current configuration."""
    settings = get_settings()
    timeout = f"{settings.replay_timeout}s" if settings.replay_timeout is not None else "transport default"
    info = f"""
[dim]Log level:[/dim]          {escape(settings.log_level)}
[dim]Log format:[/dim]         {settings.log_format}
[dim]Replay timeout:[/dim]     {timeout}
[dim]Follow redirects:[/dim]   {settings.replay_follow_redirects}
[dim]Verify TLS:[/dim]         {settings.replay_verify_tls}
[dim]Export directory:[/dim]   {escape(str(settings.export_dir))}
[dim]Top content types:[/dim]  {settings.top_content_types}"""

    console.print(Panel(info.strip(), title="⚙ Configuration", border_style="cyan"))


if __name__ == "__main__":
    app()
