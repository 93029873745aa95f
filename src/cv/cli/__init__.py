"""cv CLI -- administration shell for a site's extension system.

This module is NEVER imported from cv/__init__.py.
It is only loaded via the ``cv`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler

from cv.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cv.models.config import SiteConfig
    from cv.protocols import ExtensionServices
    from cv.repo import RepoOptions

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def _configure_logging(verbosity: int) -> None:
    """Send the ``cv`` loggers to stderr through Rich."""
    logger = logging.getLogger("cv")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
    logger.addHandler(handler)
    logger.setLevel(_LOG_LEVELS[min(verbosity, len(_LOG_LEVELS) - 1)])


@click.group()
@click.option(
    "--root",
    default=".",
    envvar="CV_ROOT",
    type=click.Path(file_okay=False),
    help="Path to the site root.",
)
@click.option(
    "--env-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Site settings file (default: <root>/.cv.env).",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.version_option(package_name="cv-shell", prog_name="cv")
@click.pass_context
def cli(ctx: click.Context, root: str, env_file: str | None, verbose: int) -> None:
    """cv: command-line administration for a CiviCRM-style site."""
    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    ctx.obj["env_file"] = env_file
    _configure_logging(verbose)


def _get_config(ctx: click.Context) -> SiteConfig:
    """Load (once per invocation) the site configuration."""
    from cv.models.config import load_site_config

    if "config" not in ctx.obj:
        ctx.obj["config"] = load_site_config(ctx.obj["root"], ctx.obj["env_file"])
    return ctx.obj["config"]


def _get_system(ctx: click.Context, *, repo_options: RepoOptions | None = None) -> ExtensionServices:
    """Boot the extension services for the current site.

    Feed options given on the command line override the site's feed URL.

    Tests and embedding hosts can supply ``obj["system_factory"]``, a
    callable ``(config, repository_url=...) -> ExtensionServices``.
    """
    from cv.extension.system import ExtensionSystem
    from cv.repo import parse_repo_url

    config = _get_config(ctx)
    repository_url = None
    if repo_options is not None:
        repository_url = parse_repo_url(repo_options, config)

    factory = ctx.obj.get("system_factory", ExtensionSystem.boot)
    return factory(config, repository_url=repository_url)


@contextmanager
def _system_session(
    ctx: click.Context,
    *,
    repo_options: RepoOptions | None = None,
) -> Iterator[tuple[ExtensionServices, Console]]:
    """Context manager that boots the services, yields (services, console), and cleans up.

    Ensures the services are closed on exit and formats exceptions as CLI errors.
    """
    console = get_console()
    try:
        system = _get_system(ctx, repo_options=repo_options)
        try:
            yield system, console
        finally:
            close = getattr(system, "close", None)
            if close is not None:
                close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from cv.cli.commands.ext_list import ext_list  # noqa: E402
from cv.cli.commands.api import api  # noqa: E402
from cv.cli.commands.shell import shell  # noqa: E402

cli.add_command(ext_list)
cli.add_command(api)
cli.add_command(shell)


def main() -> None:
    cli(obj={})
