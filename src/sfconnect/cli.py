from __future__ import annotations

import json
import logging
from typing import Any, Dict, NoReturn, Optional, Tuple

import click
import requests

from . import __version__
from .auth import get_access_token
from .config import AUTH_JWT, AUTH_OAUTH2, JWT_CREDENTIALS, SFConfig
from .env_loader import load_env_files
from .exceptions import SFConnectError
from .host import EnvHost
from .logging_config import configure_logging
from .options import sobject_options
from .pagination import api_request_all_items
from .request import RequestBuilder

_logger = logging.getLogger(__name__)

# Load .env very early, so everything else sees env vars
load_env_files()


def _make_host(ctx: click.Context) -> EnvHost:
    cfg = SFConfig.from_env()
    if ctx.obj.get("auth"):
        cfg.authentication = ctx.obj["auth"]
    return EnvHost(cfg)


def _fail(e: Exception) -> NoReturn:
    click.echo(f"❌  {e}", err=True)
    raise click.Abort() from None


def _parse_params(params: Tuple[str, ...]) -> Dict[str, str]:
    qs: Dict[str, str] = {}
    for item in params:
        key, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="--param")
        qs[key] = value
    return qs


def _echo_json(data: Any, pretty: bool) -> None:
    click.echo(json.dumps(data, indent=2 if pretty else None))


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.version_option(__version__, "--version", prog_name="sfconnect")
@click.option(
    "-v",
    "--verbose",
    "loglevel",
    flag_value=logging.INFO,
    default=None,
    help="Enable INFO logs.",
)
@click.option(
    "-vv",
    "--very-verbose",
    "loglevel",
    flag_value=logging.DEBUG,
    help="Enable DEBUG logs.",
)
@click.option(
    "--auth",
    type=click.Choice([AUTH_OAUTH2, AUTH_JWT]),
    default=None,
    help="Authentication flow (overrides SF_AUTHENTICATION).",
)
@click.pass_context
def cli(ctx: click.Context, loglevel: Optional[int], auth: Optional[str]) -> None:
    """Salesforce REST client. Use subcommands like 'request' or 'query'."""
    configure_logging(loglevel)
    ctx.ensure_object(dict)
    ctx.obj["auth"] = auth
    _logger.debug("CLI start, version=%s", __version__)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command("request")
@click.argument("method")
@click.argument("endpoint")
@click.option("--data", "data", default=None, help="JSON request body.")
@click.option("--param", "params", multiple=True, help="Query parameter as key=value.")
@click.option("--pretty", is_flag=True, help="Pretty-print JSON.")
@click.pass_context
def cmd_request(
    ctx: click.Context,
    method: str,
    endpoint: str,
    data: Optional[str],
    params: Tuple[str, ...],
    pretty: bool,
) -> None:
    """Send METHOD to ENDPOINT (relative to /services/data/v39.0)."""
    try:
        body = json.loads(data) if data else None
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--data") from None
    qs = _parse_params(params)

    try:
        builder = RequestBuilder(_make_host(ctx))
        res = builder.api_request(method, endpoint, body, qs)
    except (SFConnectError, requests.RequestException) as e:
        _fail(e)
    _echo_json(res, pretty)


@cli.command("query")
@click.argument("soql")
@click.option("--all", "fetch_all", is_flag=True, help="Follow nextRecordsUrl to the end.")
@click.option("--pretty", is_flag=True, help="Pretty-print JSON.")
@click.pass_context
def cmd_query(ctx: click.Context, soql: str, fetch_all: bool, pretty: bool) -> None:
    """Run a SOQL query."""
    try:
        builder = RequestBuilder(_make_host(ctx))
        if fetch_all:
            res: Any = api_request_all_items(builder, "records", "GET", "/query", qs={"q": soql})
        else:
            res = builder.api_request("GET", "/query", qs={"q": soql})
    except (SFConnectError, requests.RequestException) as e:
        _fail(e)
    _echo_json(res, pretty)


@cli.command("objects")
@click.option("--custom", is_flag=True, help="Only custom objects.")
@click.pass_context
def cmd_objects(ctx: click.Context, custom: bool) -> None:
    """List sObjects as 'label<TAB>api name', sorted by label."""
    try:
        res = RequestBuilder(_make_host(ctx)).api_request("GET", "/sobjects")
    except (SFConnectError, requests.RequestException) as e:
        _fail(e)

    for opt in sobject_options(res, custom_only=custom):
        click.echo(f"{opt['name']}\t{opt['value']}")


@cli.command("token")
def cmd_token() -> None:
    """Exchange a JWT assertion for an access token (connection test)."""
    try:
        cfg = SFConfig.from_env()
        cfg.authentication = AUTH_JWT
        host = EnvHost(cfg)
        res = get_access_token(host, host.get_credentials(JWT_CREDENTIALS))
    except (SFConnectError, requests.RequestException) as e:
        _fail(e)
    token = res["access_token"]
    click.echo("✅  JWT bearer token issued.")
    click.echo(f"Instance URL: {res['instance_url']}")
    click.echo(f"Token preview: {token[:10]}...{token[-6:]}")
