"""cv cli -- interactive Python console bound to the site."""

from __future__ import annotations

import code

import click

BANNER = """cv interactive shell
  system               the booted extension services
  api(entity, action, params=None)
  inventory(regex=None, remote=True, local=True)
  cv("ext:list", "-L")  run any cv subcommand"""


@click.command("cli")
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Load an interactive command line with the site's services in scope."""
    from cv.api import ApiDispatcher
    from cv.cli import _get_config, _system_session
    from cv.inventory import ExtensionInventory

    root_group = ctx.find_root().command

    def run_command(*args: str) -> int:
        """Run a cv subcommand in-process and return its exit code."""
        try:
            root_group.main(list(args), prog_name="cv", obj=dict(ctx.obj), standalone_mode=False)
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 1
        except click.ClickException as e:
            e.show()
            return e.exit_code
        return 0

    with _system_session(ctx) as (system, _console):
        inventory = ExtensionInventory(system)

        def find(regex: str | None = None, remote: bool = True, local: bool = True):
            return inventory.find(regex, remote=remote, local=local)

        namespace = {
            "system": system,
            "api": ApiDispatcher(system, _get_config(ctx)),
            "inventory": find,
            "cv": run_command,
        }
        code.interact(banner=BANNER, local=namespace, exitmsg="")
