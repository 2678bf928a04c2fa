"""Async HTTP transport for the storefront's upload endpoint.

The endpoint accepts a multipart ``POST`` with the file under one form
field and answers ``{"urls": ["https://..."]}``.  How it stores the bytes
is none of the pipeline's business.

Request lifecycle for one :meth:`AsyncUploadTransport.send` call:

1. POST the multipart body.
2. On ``2xx`` -- return the list of public URLs.
3. On a non-``2xx`` status -- raise :class:`UploadTransportError`.
4. On timeout / network failure -- raise :class:`UploadNetworkError`.
5. On ``2xx`` without URLs -- raise :class:`UploadResponseError`.

Retrying is not done here; see :mod:`catalogmedia.uploader`.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from catalogmedia.config import UploaderConfig
from catalogmedia.errors import (
    UploadNetworkError,
    UploadResponseError,
    UploadTransportError,
)
from catalogmedia.models import UploadPayload
from catalogmedia.observability import NoopMetricsHook, get_logger

log = get_logger("catalogmedia.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _response_body(response: httpx.Response) -> Any:
    """Parsed JSON body, or a truncated text body when it is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


def _raise_for_status(response: httpx.Response, payload: UploadPayload) -> None:
    """Raise :class:`UploadTransportError` for a non-2xx response."""
    status = response.status_code
    raise UploadTransportError(
        message=f"Upload failed with status {status}",
        context={
            "name": payload.source_name,
            "status_code": status,
            "body": _response_body(response),
        },
    )


def _extract_urls(response: httpx.Response, payload: UploadPayload) -> list[str]:
    """Pull the public URLs out of a successful response."""
    try:
        body = response.json()
    except ValueError as exc:
        raise UploadResponseError(
            message="Upload response was not valid JSON",
            context={
                "name": payload.source_name,
                "status_code": response.status_code,
                "body": response.text[:500],
            },
            cause=exc,
        ) from exc

    urls = body.get("urls") if isinstance(body, dict) else None
    if not isinstance(urls, list):
        urls = []
    urls = [url for url in urls if isinstance(url, str) and url]
    if not urls:
        raise UploadResponseError(
            message="No URLs returned from upload",
            context={
                "name": payload.source_name,
                "status_code": response.status_code,
                "body": body,
            },
        )
    return urls


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncUploadTransport:
    """Send one payload per request to the upload endpoint.

    Parameters
    ----------
    config:
        Supplies ``base_url``, ``upload_path``, ``upload_field``,
        ``timeout_seconds`` and ``metrics``.
    client:
        An ``httpx.AsyncClient`` owned by the caller.  When omitted, the
        transport creates one and closes it in :meth:`close`; an injected
        client is left open.
    """

    def __init__(
        self,
        config: UploaderConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._url = f"{config.base_url.rstrip('/')}{config.upload_path}"
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    @property
    def url(self) -> str:
        return self._url

    # -- public API --------------------------------------------------------

    async def send(self, payload: UploadPayload) -> list[str]:
        """Upload *payload* and return the public URLs the endpoint reports.

        Raises
        ------
        UploadTransportError
            On a non-2xx response.
        UploadNetworkError
            When no response was received (timeout, refused, reset).
        UploadResponseError
            When a 2xx response carries no URL.
        """
        files = {
            self._config.upload_field: (payload.name, payload.data, payload.content_type),
        }
        context = {"name": payload.source_name, "url": self._url}

        t0 = time.monotonic()
        try:
            response = await self._client.post(self._url, files=files)
        except httpx.TimeoutException as exc:
            raise UploadNetworkError(
                message=f"Upload of {payload.name} timed out: {exc}",
                context=context,
                cause=exc,
            ) from exc
        except (httpx.NetworkError, httpx.RemoteProtocolError) as exc:
            raise UploadNetworkError(
                message=f"Network error while uploading {payload.name}: {exc}",
                context=context,
                cause=exc,
            ) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000

        self._metrics.timing(
            "catalogmedia.upload_duration_ms",
            elapsed_ms,
            tags={"status": str(response.status_code)},
        )
        log.debug(
            "Upload response received",
            extra={
                "extra_fields": {
                    "op": "send",
                    "file": payload.name,
                    "bytes": len(payload.data),
                    "status_code": response.status_code,
                    "duration_ms": round(elapsed_ms, 2),
                }
            },
        )

        if not 200 <= response.status_code < 300:
            _raise_for_status(response, payload)

        return _extract_urls(response, payload)

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncUploadTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
