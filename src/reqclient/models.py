"""Canonical Pydantic models shared across reqclient modules.

The models fall into two groups:

**Client models** -- constructed by library callers:
    :class:`ClientConfig` (immutable, one per :class:`~reqclient.client.RequestClient`),
    :class:`RequestOptions` (transient, one per call) and
    :class:`ProgressEvent` (handed to progress callbacks).

**Configuration file models** -- serialised as JSON in the user's config
directory and loaded by :mod:`reqclient.config`:
    :class:`OutputConfig` and :class:`GlobalConfig`.

Durations are expressed in milliseconds throughout.
"""

from __future__ import annotations

from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from reqclient.cancellation import CancellationToken

DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_RETRY_DELAY_MS = 1000


# --- Client models ---


class ClientConfig(BaseModel):
    """Construction-time settings for a :class:`~reqclient.client.RequestClient`.

    The model is frozen: a client's configuration cannot change after it
    is built. ``headers`` are layered over ``Content-Type:
    application/json`` when the client is created, and per-call headers
    are layered over the result.

    Example::

        ClientConfig(
            base_url="https://api.example.com",
            headers={"Authorization": "Bearer abc"},
            retry_attempts=2,
            retry_delay=250,
        )
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default="", description="Prefix prepended to every request path")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Default headers sent with every request"
    )
    timeout: int = Field(
        default=DEFAULT_TIMEOUT_MS, gt=0, description="Request timeout in milliseconds"
    )
    retry_attempts: int = Field(
        default=0, ge=0, description="Extra attempts after an HTTP error response"
    )
    retry_delay: int = Field(
        default=DEFAULT_RETRY_DELAY_MS,
        ge=0,
        description="Base backoff in milliseconds, multiplied by the attempt number",
    )


class ProgressEvent(BaseModel):
    """Transfer progress reported by the transport for one direction."""

    model_config = ConfigDict(frozen=True)

    loaded: int = 0
    total: int = 0
    length_computable: bool = False
    direction: Literal["upload", "download"] = "download"


ProgressCallback = Callable[[ProgressEvent], Any]


class RequestOptions(BaseModel):
    """Per-call options for :meth:`~reqclient.client.RequestClient.request`.

    Request interceptors receive an instance of this model and return
    either a (possibly new) instance or a mapping that validates into one.
    A header whose value is ``None`` is treated as unset and not sent.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: Optional[str] = None
    data: Any = None
    params: Optional[dict[str, Any]] = None
    headers: dict[str, Optional[str]] = Field(default_factory=dict)
    timeout: Optional[int] = Field(default=None, gt=0)
    cache: bool = False
    signal: Optional[CancellationToken] = None
    on_progress: Optional[ProgressCallback] = None

    @property
    def resolved_method(self) -> str:
        """Upper-cased HTTP method, defaulting to ``GET``."""
        return (self.method or "GET").upper()


# --- Configuration file models ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/reqclient/config.json``.

    Loaded and saved by :func:`~reqclient.config.load_global_config` and
    :func:`~reqclient.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by the project config,
    environment variables, or CLI flags. See
    :func:`~reqclient.config.resolve_client_config` for the full chain.
    """

    client: ClientConfig = Field(default_factory=ClientConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
