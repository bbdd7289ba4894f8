"""URL, header and body preparation for outgoing requests.

These helpers are pure functions so the request pipeline in
:mod:`reqclient.client.request_client` stays small and each rule can be
tested on its own:

* :func:`build_url` -- base URL + path + query string.
* :func:`merge_headers` -- layered, case-insensitive header merge.
* :func:`serialize_body` -- encode the payload for the resolved Content-Type.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Optional, Union
from urllib.parse import quote, urlencode

from reqclient.models import DEFAULT_CONTENT_TYPE

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Characters encodeURIComponent leaves alone on top of quote()'s defaults.
_COMPONENT_SAFE = "!*'()"


def build_url(base_url: str, path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Concatenate *base_url* and *path* and append *params* as a query string.

    The separator is ``&`` when the URL already carries a query, ``?``
    otherwise. Sequence values expand to repeated keys.

    Example::

        >>> build_url("https://api.test", "/u?x=1", {"page": 2})
        'https://api.test/u?x=1&page=2'
    """
    url = f"{base_url}{path}"
    if params:
        query = urlencode(dict(params), doseq=True)
        if query:
            url += ("&" if "?" in url else "?") + query
    return url


def merge_headers(*layers: Optional[Mapping[str, Optional[str]]]) -> dict[str, Optional[str]]:
    """Merge header mappings left to right; later layers win.

    Names are compared case-insensitively, and the spelling from the
    winning layer is kept.
    """
    merged: dict[str, Optional[str]] = {}
    names: dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for name, value in layer.items():
            previous = names.get(name.lower())
            if previous is not None:
                del merged[previous]
            merged[name] = value
            names[name.lower()] = name
    return merged


def header_value(headers: Mapping[str, Optional[str]], name: str) -> Optional[str]:
    """Case-insensitive lookup of *name* in *headers*."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def serialize_body(data: Any, content_type: Optional[str] = None) -> Union[str, bytes, None]:
    """Encode *data* according to *content_type*.

    Rules, in order:

    1. ``None`` -> no body.
    2. ``bytes`` -> sent unchanged (raw binary or pre-encoded multipart).
    3. JSON content type -> :func:`json.dumps`.
    4. url-encoded content type -> ``key=value`` pairs joined with ``&``
       (a ``str`` is assumed to be encoded already).
    5. ``str`` -> sent unchanged.
    6. anything else -> :func:`json.dumps`.

    Pydantic models are dumped to JSON-compatible data first.
    """
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)

    content_type = (content_type or DEFAULT_CONTENT_TYPE).lower()
    if JSON_CONTENT_TYPE in content_type:
        return json.dumps(_jsonable(data))
    if FORM_CONTENT_TYPE in content_type:
        if isinstance(data, str):
            return data
        return form_urlencode(_jsonable(data))
    if isinstance(data, str):
        return data
    return json.dumps(_jsonable(data))


def form_urlencode(data: Any) -> str:
    """Percent-encode a mapping (or sequence of pairs) as ``k=v&k2=v2``."""
    items = data.items() if isinstance(data, Mapping) else data
    return "&".join(
        f"{_encode_component(key)}={_encode_component(value)}" for key, value in items
    )


def _encode_component(value: Any) -> str:
    if value is None:
        text = "null"
    elif isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return quote(text, safe=_COMPONENT_SAFE)


def _jsonable(data: Any) -> Any:
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json")
    return data
