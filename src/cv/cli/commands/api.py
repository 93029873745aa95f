"""cv api -- call an Entity.action on the site's API."""

from __future__ import annotations

import json

import click

from cv.encoder import encode, get_default_format, get_formats


def _parse_params(pairs: tuple[str, ...]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="PARAMS")
        params[name] = value
    return params


def _read_json_params() -> dict:
    raw = click.get_text_stream("stdin").read()
    if not raw.strip():
        return {}
    try:
        params = json.loads(raw)
    except ValueError as e:
        raise click.BadParameter(f"stdin is not valid JSON: {e}", param_hint="--in") from None
    if not isinstance(params, dict):
        raise click.BadParameter("stdin must hold a JSON object", param_hint="--in")
    return params


@click.command()
@click.argument("target", metavar="ENTITY.ACTION")
@click.argument("params", nargs=-1)
@click.option(
    "--in",
    "in_format",
    default="args",
    type=click.Choice(["args", "json"]),
    show_default=True,
    help="Read parameters from key=value arguments or from JSON on stdin.",
)
@click.option(
    "--out",
    default=lambda: get_default_format("json-pretty", allowed=get_formats()),
    type=click.Choice(get_formats()),
    help="Output format.",
)
@click.pass_context
def api(ctx: click.Context, target: str, params: tuple[str, ...], in_format: str, out: str) -> None:
    """Call ENTITY.ACTION with PARAMS given as key=value pairs.

    \b
    Examples:
      cv api system.get
      cv api extension.get status=installed
      echo '{"local": false}' | cv api extension.refresh --in=json
    """
    from cv.api import ApiDispatcher
    from cv.cli import _get_config, _system_session

    entity, sep, action = target.partition(".")
    if not sep or not entity or not action:
        raise click.BadParameter(f"expected ENTITY.ACTION, got {target!r}", param_hint="ENTITY.ACTION")

    call_params: dict = _parse_params(params)
    if in_format == "json":
        call_params = {**_read_json_params(), **call_params}

    with _system_session(ctx) as (system, _console):
        result = ApiDispatcher(system, _get_config(ctx)).call(entity, action, call_params)
        encoded = encode(result, out)
        if encoded:
            click.echo(encoded)
        if result["is_error"]:
            raise SystemExit(1)
