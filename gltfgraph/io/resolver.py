"""URI resolvers used to fetch external buffer and image payloads."""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Union
from urllib.parse import unquote, unquote_to_bytes

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from gltfgraph.config import DEFAULT_HTTP_RETRIES, DEFAULT_HTTP_TIMEOUT, get_float, get_int
from gltfgraph.errors import InvalidUriError, ResolverError

LOGGER = logging.getLogger(__name__)


class Resolver(Protocol):
    """Capability turning a URI into bytes."""

    async def resolve(self, uri: str) -> bytes:  # pragma: no cover - interface
        ...


def is_data_uri(uri: Optional[str]) -> bool:
    return bool(uri) and uri.startswith("data:")


def decode_data_uri(uri: str) -> bytes:
    """Decode ``data:[<mime>][;base64],<payload>``."""

    if not is_data_uri(uri):
        raise InvalidUriError(f"not a data URI: {uri[:32]!r}")
    header, separator, payload = uri[len("data:") :].partition(",")
    if not separator:
        raise InvalidUriError("data URI has no ',' separator")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidUriError(f"invalid base64 payload in data URI: {exc}") from exc
    return unquote_to_bytes(payload)


def data_uri_mime_type(uri: str) -> Optional[str]:
    """Return the media type declared by a data URI, if any."""

    if not is_data_uri(uri):
        return None
    header = uri[len("data:") :].split(",", 1)[0]
    mime = header.split(";", 1)[0]
    return mime or None


def encode_data_uri(data: bytes, mime_type: str = "application/octet-stream") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class DataUriResolver:
    """Resolve embedded ``data:`` URIs without any I/O."""

    async def resolve(self, uri: str) -> bytes:
        return decode_data_uri(uri)


@dataclass
class FileResolver:
    """Resolve relative URIs against ``root`` on the local filesystem.

    Reads run in a worker thread so several resources can be fetched while the
    event loop stays responsive. URIs escaping ``root`` are rejected.
    """

    root: Union[str, Path]

    def path_for(self, uri: str) -> Path:
        root = Path(self.root).resolve()
        candidate = (root / unquote(uri)).resolve()
        if candidate != root and root not in candidate.parents:
            raise InvalidUriError(f"URI {uri!r} escapes resolver root")
        return candidate

    async def resolve(self, uri: str) -> bytes:
        path = self.path_for(uri)
        LOGGER.debug("Reading %s", path)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ResolverError(f"cannot read {uri!r}: {exc}") from exc


class _ServerError(Exception):
    """Raised for 5xx responses so the retry policy sees them."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"server error {response.status_code} for {response.request.url}")
        self.response = response


@dataclass
class HttpResolver:
    """Resolve URIs relative to ``base_url`` over HTTP(S) with ``httpx``.

    Transport errors and 5xx responses are retried with exponential backoff;
    4xx responses fail immediately. ``timeout`` and ``retries`` default to
    ``GLTFGRAPH_HTTP_TIMEOUT`` and ``GLTFGRAPH_HTTP_RETRIES``.
    """

    base_url: str = ""
    timeout: float = field(default_factory=lambda: get_float("GLTFGRAPH_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
    retries: int = field(default_factory=lambda: get_int("GLTFGRAPH_HTTP_RETRIES", DEFAULT_HTTP_RETRIES))
    backoff: float = 0.5
    transport: Optional[httpx.AsyncBaseTransport] = None

    def url_for(self, uri: str) -> str:
        if not self.base_url:
            return uri
        return str(httpx.URL(self.base_url).join(uri))

    async def resolve(self, uri: str) -> bytes:
        url = self.url_for(uri)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                async for attempt in AsyncRetrying(
                    stop=stop_after_attempt(max(1, self.retries)),
                    wait=wait_exponential(multiplier=self.backoff, max=10),
                    retry=retry_if_exception_type((httpx.TransportError, _ServerError)),
                    before_sleep=before_sleep_log(LOGGER, logging.WARNING),
                    reraise=True,
                ):
                    with attempt:
                        response = await client.get(url)
                        if response.status_code >= 500:
                            raise _ServerError(response)
                        response.raise_for_status()
                        return response.content
            except (httpx.HTTPError, _ServerError) as exc:
                raise ResolverError(f"cannot fetch {url!r}: {exc}") from exc
        raise ResolverError(f"cannot fetch {url!r}")  # pragma: no cover - loop always returns or raises


async def resolve_uri(uri: Optional[str], resolver: Optional[Resolver] = None) -> Optional[bytes]:
    """Best-effort resolution: data URI first, then ``resolver``.

    Returns ``None`` (after logging) when the URI cannot be resolved, whatever
    the resolver raised.
    """

    if not uri:
        return None
    if is_data_uri(uri):
        try:
            return decode_data_uri(uri)
        except InvalidUriError as exc:
            LOGGER.warning("Failed to decode data URI: %s", exc)
            return None
    if resolver is None:
        LOGGER.debug("No resolver for %s", uri)
        return None
    try:
        return await resolver.resolve(uri)
    except Exception as exc:  # any resolver failure
        LOGGER.warning("Failed to resolve %s: %s", uri, exc)
        return None


__all__ = [
    "DataUriResolver",
    "FileResolver",
    "HttpResolver",
    "Resolver",
    "data_uri_mime_type",
    "decode_data_uri",
    "encode_data_uri",
    "is_data_uri",
    "resolve_uri",
]
