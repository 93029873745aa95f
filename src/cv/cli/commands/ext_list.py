"""cv ext:list -- list remote and local extensions."""

from __future__ import annotations

import logging

import click

from cv.encoder import encode, get_default_format, get_formats
from cv.models.extension import COLUMNS

logger = logging.getLogger(__name__)


def repo_options(func):
    """Attach the feed selection options shared by extension commands."""
    options = [
        click.option("--repo", default=None, help="Extension feed base URL."),
        click.option("--dev", is_flag=True, help="Include developmental extensions (lifts status and readiness filters)."),
        click.option("--filter-ver", default=None, help="Filter the feed by host version."),
        click.option("--filter-uf", default=None, help="Filter the feed by CMS/UF."),
        click.option("--filter-status", default=None, help="Filter the feed by development status (default: stable)."),
        click.option("--filter-ready", default=None, help="Filter the feed by review status (default: ready)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.command("ext:list")
@click.argument("regex", required=False)
@click.option("-L", "--local", is_flag=True, help="Show local extensions.")
@click.option("-R", "--remote", is_flag=True, help="Show remote extensions.")
@click.option("-r", "--refresh", is_flag=True, help="Refresh the list of extensions.")
@click.option(
    "--columns",
    default=",".join(COLUMNS),
    show_default=True,
    help="List of columns to display (comma separated).",
)
@click.option(
    "--out",
    default=lambda: get_default_format("table", allowed=["table", *get_formats()]),
    type=click.Choice(["table", *get_formats()]),
    help="Output format.",
)
@repo_options
@click.pass_context
def ext_list(
    ctx: click.Context,
    regex: str | None,
    local: bool,
    remote: bool,
    refresh: bool,
    columns: str,
    out: str,
    repo: str | None,
    dev: bool,
    filter_ver: str | None,
    filter_uf: str | None,
    filter_status: str | None,
    filter_ready: str | None,
) -> None:
    """List extensions, optionally filtered by REGEX on full key or short name.

    \b
    Examples:
      cv ext:list
      cv ext:list --remote --dev /mail/
      cv ext:list '/^org.civicrm.*/'

    Short names ("foobar") are not strongly guaranteed to be unique; long
    keys ("org.example.foobar") are.
    """
    from cv.api import ApiDispatcher
    from cv.cli import _system_session
    from cv.cli.formatting import format_error, format_info, format_table
    from cv.inventory import ExtensionInventory, resolve_locations
    from cv.repo import RepoOptions
    from cv.util.columns import parse_columns, project_rows, rows_to_table

    local, remote = resolve_locations(local, remote)
    options = RepoOptions(
        repo=repo,
        dev=dev,
        filter_ver=filter_ver,
        filter_uf=filter_uf,
        filter_status=filter_status,
        filter_ready=filter_ready,
    )

    with _system_session(ctx, repo_options=options) as (system, console):
        if remote:
            message = f'Using extension feed "{system.repository_url}"'
            if out == "table":
                format_info(message, console)
            else:
                logger.info(message)

        if refresh:
            logger.info("Refreshing extensions")
            result = ApiDispatcher(system).call("Extension", "refresh", {"local": local, "remote": remote})
            if result["is_error"]:
                format_error(result["error_message"], console)
                raise SystemExit(1)

        column_list = parse_columns(columns)
        records = ExtensionInventory(system).find(regex, remote=remote, local=local)

        if out == "table":
            format_table(column_list, rows_to_table(records, column_list), console)
        else:
            encoded = encode(project_rows(records, column_list), out)
            if encoded:
                click.echo(encoded)
