"""Typer application and CLI entry point for reqclient.

The ``reqclient`` console script exposes one command per HTTP verb
(``get``, ``post``, ``put``, ``patch``, ``delete``) plus the ``config``
group. Each verb command resolves a :class:`~reqclient.models.ClientConfig`
through :func:`~reqclient.config.resolve_client_config`, runs a single call
through :class:`~reqclient.client.RequestClient` on a fresh event loop, and
prints the status line to stderr and the body to stdout.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`reqclient.config`: configuration resolution.
    :mod:`reqclient.output`: output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import json
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, List, Optional

import typer

from reqclient import __version__
from reqclient.commands.config import config_app
from reqclient.exceptions import HTTPResponseError, InvalidUsageError, RequestClientError
from reqclient.exit_codes import EXIT_GENERIC_FAILURE
from reqclient.models import ClientConfig, ProgressEvent

app = typer.Typer(
    name="reqclient",
    help="Send HTTP requests with default headers, timeouts, and retry.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config", help="Configuration management.")

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"reqclient {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~reqclient.output.OutputManager` from
    CLI flags, falling back to the ``output.format`` setting of the global
    config when neither ``--json`` nor ``--plain`` is given.
    """
    from reqclient.config import load_global_config
    from reqclient.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        try:
            fmt = OutputFormat(load_global_config().output.format)
        except (RequestClientError, ValueError):
            fmt = OutputFormat.AUTO

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


# ------------------------------------------------------------------ #
# Verb commands
# ------------------------------------------------------------------ #

_URL_ARG = typer.Argument(help="Request path (joined to the base URL) or absolute URL.")
_DATA_OPT = typer.Option(None, "--data", "-d", help="Request body; JSON is parsed, anything else is sent as text.")
_BASE_URL_OPT = typer.Option(None, "--base-url", "-b", help="Base URL prepended to the path.")
_HEADER_OPT = typer.Option(None, "--header", "-H", help="Extra header as 'Name: value' (repeatable).")
_PARAM_OPT = typer.Option(None, "--param", "-P", help="Query parameter as 'key=value' (repeatable).")
_TIMEOUT_OPT = typer.Option(None, "--timeout", "-t", help="Timeout in milliseconds.")
_RETRIES_OPT = typer.Option(None, "--retries", "-r", help="Retry attempts after an HTTP error response.")
_RETRY_DELAY_OPT = typer.Option(None, "--retry-delay", help="Base retry delay in milliseconds.")
_FORM_OPT = typer.Option(False, "--form", help="Send the body url-encoded instead of as JSON.")
_PROGRESS_OPT = typer.Option(False, "--progress", help="Report transfer progress on stderr.")


def _register_verb(method: str, with_body: bool) -> None:
    """Attach a ``reqclient <method>`` command to :data:`app`."""
    if with_body:

        def command(
            url: str = _URL_ARG,
            data: Optional[str] = _DATA_OPT,
            base_url: Optional[str] = _BASE_URL_OPT,
            header: Optional[List[str]] = _HEADER_OPT,
            param: Optional[List[str]] = _PARAM_OPT,
            timeout: Optional[int] = _TIMEOUT_OPT,
            retries: Optional[int] = _RETRIES_OPT,
            retry_delay: Optional[int] = _RETRY_DELAY_OPT,
            form: bool = _FORM_OPT,
            progress: bool = _PROGRESS_OPT,
        ) -> None:
            _run(method, url, data, base_url, header, param, timeout, retries, retry_delay, form, progress)

    else:

        def command(  # type: ignore[misc]
            url: str = _URL_ARG,
            base_url: Optional[str] = _BASE_URL_OPT,
            header: Optional[List[str]] = _HEADER_OPT,
            param: Optional[List[str]] = _PARAM_OPT,
            timeout: Optional[int] = _TIMEOUT_OPT,
            retries: Optional[int] = _RETRIES_OPT,
            retry_delay: Optional[int] = _RETRY_DELAY_OPT,
            progress: bool = _PROGRESS_OPT,
        ) -> None:
            _run(method, url, None, base_url, header, param, timeout, retries, retry_delay, False, progress)

    command.__doc__ = f"Send a {method} request and print the response body."
    app.command(method.lower())(command)


for _method, _with_body in (
    ("GET", False),
    ("POST", True),
    ("PUT", True),
    ("PATCH", True),
    ("DELETE", False),
):
    _register_verb(_method, _with_body)


def _run(
    method: str,
    url: str,
    data: Optional[str],
    base_url: Optional[str],
    header: Optional[List[str]],
    param: Optional[List[str]],
    timeout: Optional[int],
    retries: Optional[int],
    retry_delay: Optional[int],
    form: bool,
    show_progress: bool,
) -> None:
    """Resolve config, perform one call and render the outcome.

    Library errors are reported on stderr and converted to
    :class:`typer.Exit` with the error's ``exit_code``. For HTTP error
    responses the body is printed as well.
    """
    from reqclient.client.response import format_api_response
    from reqclient.config import resolve_client_config
    from reqclient.output import error

    try:
        config = resolve_client_config(
            cli_base_url=base_url,
            cli_headers=_parse_header_args(header),
            cli_timeout=timeout,
            cli_retry_attempts=retries,
            cli_retry_delay=retry_delay,
        )
        options: dict[str, Any] = {
            "method": method,
            "data": _parse_body(data),
            "params": _parse_param_args(param) or None,
        }
        if form:
            options["headers"] = {"Content-Type": FORM_CONTENT_TYPE}
        if show_progress:
            options["on_progress"] = _report_progress

        response = asyncio.run(_perform(config, url, options))
    except HTTPResponseError as exc:
        format_api_response(exc.response)
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except RequestClientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_api_response(response)


async def _perform(config: ClientConfig, url: str, options: dict[str, Any]) -> Any:
    from reqclient.client import RequestClient

    async with RequestClient(config) as client:
        return await client.request(url, options)


def _report_progress(event: ProgressEvent) -> None:
    from reqclient.output import progress

    if event.length_computable:
        progress(f"{event.direction}: {event.loaded}/{event.total} bytes")
    else:
        progress(f"{event.direction}: {event.loaded} bytes")


def _parse_header_args(values: Optional[List[str]]) -> dict[str, str]:
    """Parse repeated ``Name: value`` arguments into a header mapping."""
    headers: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header {raw!r}; expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def _parse_param_args(values: Optional[List[str]]) -> dict[str, str]:
    """Parse repeated ``key=value`` arguments into a query mapping."""
    params: dict[str, str] = {}
    for raw in values or []:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid query parameter {raw!r}; expected 'key=value'")
        params[key] = value
    return params


def _parse_body(body: Optional[str]) -> Any:
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from reqclient.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``reqclient`` console script.

    :class:`~reqclient.exceptions.RequestClientError` instances that escape
    a command cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from reqclient.output import error

        if isinstance(exc, RequestClientError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)


if __name__ == "__main__":
    main()
