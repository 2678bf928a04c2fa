"""Batch media uploader.

:class:`MediaUploader` drives each selected file through the pipeline:

1. Validate (size ceiling, MIME prefix).  Rejected files are reported and
   skipped.
2. Normalize images into square JPEGs.  If decoding or encoding fails the
   original bytes are uploaded instead.  Videos pass through untouched.
3. Transfer with retry: retryable failures are retried with linear backoff
   up to ``retry_max_attempts`` tries; terminal failures stop at once.
4. Aggregate URLs in completion order into an :class:`UploadResult`.

Failures are scoped to the file that caused them; siblings are always
attempted.

Usage::

    import asyncio
    from catalogmedia import MediaUploader, PendingFile, UploaderConfig

    async def main():
        config = UploaderConfig(base_url="https://shop.example.com")
        async with MediaUploader(config) as uploader:
            result = await uploader.upload_batch(
                [PendingFile.from_path("gelato-41.png")],
                on_notice=print,
            )
            print(result.succeeded_urls)

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import Any, Union

import httpx

from catalogmedia.config import UploaderConfig
from catalogmedia.errors import ImageProcessingError, UploadError
from catalogmedia.media.normalize import async_normalize_image
from catalogmedia.media.validate import check_file
from catalogmedia.models import (
    AttemptOutcome,
    FailedFile,
    MediaKind,
    Notice,
    NoticeKind,
    PendingFile,
    TransferOutcome,
    UploadAttempt,
    UploadedFile,
    UploadPayload,
    UploadResult,
)
from catalogmedia.observability import NoopMetricsHook, get_logger
from catalogmedia.storage.retries import compute_backoff, is_retryable
from catalogmedia.storage.transport import AsyncUploadTransport
from catalogmedia.utils.sizes import format_file_size

log = get_logger("catalogmedia.uploader")

NoticeCallback = Callable[[Notice], Union[None, Awaitable[None]]]
CompleteCallback = Callable[[list[str]], Union[None, Awaitable[None]]]


async def _call(callback: Callable[..., Any] | None, *args: Any) -> None:
    """Invoke a sync or async callback, if one was given."""
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class MediaUploader:
    """Validate, normalize and upload batches of product media.

    Parameters
    ----------
    config:
        Pipeline configuration.  Defaults to :class:`UploaderConfig()`.
    client:
        Optional ``httpx.AsyncClient`` owned by the caller, used by the
        default transport.  Ignored when *transport* is given.
    transport:
        Optional transport exposing ``async send(payload) -> list[str]``
        and ``async close()``.  Tests pass a fake here.
    """

    def __init__(
        self,
        config: UploaderConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: Any | None = None,
    ) -> None:
        self._config = config if config is not None else UploaderConfig()
        self._transport = (
            transport if transport is not None
            else AsyncUploadTransport(self._config, client)
        )
        self._metrics = (
            self._config.metrics if self._config.metrics is not None else NoopMetricsHook()
        )

    @property
    def config(self) -> UploaderConfig:
        return self._config

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    async def upload_batch(
        self,
        files: Iterable[PendingFile],
        *,
        on_notice: NoticeCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> UploadResult:
        """Run every file through validate -> normalize -> upload.

        Parameters
        ----------
        files:
            Files selected in one upload action.
        on_notice:
            Called with a :class:`Notice` for each rejection, normalization
            step, retry and failure, in the order they happen.
        on_complete:
            Called once with the uploaded URLs after the last file, only
            when at least one upload succeeded.

        Returns
        -------
        UploadResult
            Always returned, including when every file failed.
        """
        batch = list(files)
        if len(batch) > self._config.max_number_of_files:
            log.warning(
                "Batch larger than max_number_of_files",
                extra={
                    "extra_fields": {
                        "op": "upload_batch",
                        "files": len(batch),
                        "max_number_of_files": self._config.max_number_of_files,
                    }
                },
            )

        result = UploadResult()
        t0 = time.monotonic()

        if self._config.max_concurrent_files == 1:
            for file in batch:
                await self._process_file(file, result, on_notice)
        else:
            semaphore = asyncio.Semaphore(self._config.max_concurrent_files)

            async def _process_one(file: PendingFile) -> None:
                async with semaphore:
                    await self._process_file(file, result, on_notice)

            await asyncio.gather(*(_process_one(file) for file in batch))

        log.info(
            "Upload batch finished",
            extra={
                "extra_fields": {
                    "op": "upload_batch",
                    "files": len(batch),
                    "uploaded": len(result.succeeded_urls),
                    "failed": len(result.failed_files),
                    "rejected": len(result.rejected),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                }
            },
        )

        if result.succeeded_urls:
            count = len(result.succeeded_urls)
            await _call(on_notice, Notice(
                kind=NoticeKind.COMPLETED,
                file_name="",
                message=f"Uploaded {count} file(s) to storage",
                context={"uploaded": count, "failed": len(result.failed_files)},
            ))
            await _call(on_complete, list(result.succeeded_urls))

        return result

    async def upload_paths(
        self,
        paths: Iterable[str | Path],
        *,
        on_notice: NoticeCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> UploadResult:
        """Read files from disk and upload them as one batch.

        MIME types are sniffed from the file contents.
        """
        loop = asyncio.get_running_loop()
        files = [
            await loop.run_in_executor(None, PendingFile.from_path, path)
            for path in paths
        ]
        return await self.upload_batch(files, on_notice=on_notice, on_complete=on_complete)

    # ------------------------------------------------------------------
    # Per-file stages
    # ------------------------------------------------------------------

    async def prepare(
        self,
        file: PendingFile,
        on_notice: NoticeCallback | None = None,
    ) -> UploadPayload:
        """Build the payload to upload for an accepted *file*.

        Images are normalized; on :class:`ImageProcessingError` the original
        file is used and an ``OPTIMIZATION_FAILED`` notice is emitted.
        Other media is returned as-is.
        """
        if file.kind != MediaKind.IMAGE:
            return UploadPayload.from_pending(file)

        await _call(on_notice, Notice(
            kind=NoticeKind.OPTIMIZING,
            file_name=file.name,
            message=f"Processing {file.name} for best web performance",
        ))

        t0 = time.monotonic()
        try:
            normalized = await async_normalize_image(file, self._config)
        except ImageProcessingError as exc:
            log.warning(
                "Image optimization failed, uploading original",
                extra={
                    "extra_fields": {
                        "op": "prepare",
                        "file": file.name,
                        "code": exc.code,
                        "error": exc.message,
                    }
                },
            )
            await _call(on_notice, Notice(
                kind=NoticeKind.OPTIMIZATION_FAILED,
                file_name=file.name,
                message=f"Using original image for {file.name}",
                context={"code": exc.code, "error": exc.message},
            ))
            return UploadPayload.from_pending(file)

        self._metrics.timing(
            "catalogmedia.normalize_duration_ms",
            (time.monotonic() - t0) * 1000,
            tags={"passes": str(normalized.encode_passes)},
        )
        self._metrics.gauge(
            "catalogmedia.bytes_saved",
            normalized.original_size - normalized.encoded_size,
        )

        await _call(on_notice, Notice(
            kind=NoticeKind.OPTIMIZED,
            file_name=file.name,
            message=(
                f"Optimized: {format_file_size(normalized.original_size)} -> "
                f"{format_file_size(normalized.encoded_size)} "
                f"({normalized.savings_percent}% smaller, {normalized.dimensions})"
            ),
            context={
                "original_size": normalized.original_size,
                "encoded_size": normalized.encoded_size,
                "dimensions": normalized.dimensions,
                "quality": normalized.quality,
                "encode_passes": normalized.encode_passes,
            },
        ))
        return UploadPayload.from_normalized(normalized, file.name)

    async def transfer(
        self,
        payload: UploadPayload,
        on_notice: NoticeCallback | None = None,
    ) -> TransferOutcome:
        """Upload *payload*, retrying transient failures.

        At most ``retry_max_attempts`` tries are made.  There is no delay
        before the first; after failed attempt *n* the wait is
        ``retry_base_delay * n``.  Terminal failures stop immediately.
        Transfer errors are recorded in the outcome, never raised.
        """
        max_attempts = self._config.retry_max_attempts
        name = payload.source_name
        attempts: list[UploadAttempt] = []

        for attempt_number in range(1, max_attempts + 1):
            self._metrics.increment(
                "catalogmedia.upload_attempts_total",
                tags={"content_type": payload.content_type},
            )
            try:
                urls = await self._transport.send(payload)
            except (UploadError, httpx.HTTPError) as exc:
                error = exc.message if isinstance(exc, UploadError) else str(exc)
                retryable = is_retryable(exc, self._config.retryable_statuses)
                attempts.append(UploadAttempt(
                    attempt_number=attempt_number,
                    outcome=(
                        AttemptOutcome.RETRYABLE_FAILURE if retryable
                        else AttemptOutcome.TERMINAL_FAILURE
                    ),
                    error=error,
                ))
                log.warning(
                    "Upload attempt failed",
                    extra={
                        "extra_fields": {
                            "op": "transfer",
                            "file": name,
                            "attempt": attempt_number,
                            "max_attempts": max_attempts,
                            "retryable": retryable,
                            "error": error,
                        }
                    },
                )
                if not retryable or attempt_number >= max_attempts:
                    break

                delay = compute_backoff(attempt_number, self._config.retry_base_delay)
                self._metrics.increment("catalogmedia.retries_total")
                await _call(on_notice, Notice(
                    kind=NoticeKind.RETRYING,
                    file_name=name,
                    message=(
                        f"Connection issue detected. Retrying {name} "
                        f"(attempt {attempt_number + 1}/{max_attempts})..."
                    ),
                    context={
                        "attempt": attempt_number + 1,
                        "max_attempts": max_attempts,
                        "delay_seconds": delay,
                        "error": error,
                    },
                ))
                await asyncio.sleep(delay)
                continue

            if len(urls) > 1:
                log.warning(
                    "Upload returned more than one URL; keeping the first",
                    extra={"extra_fields": {"op": "transfer", "file": name, "urls": urls}},
                )
            attempts.append(UploadAttempt(
                attempt_number=attempt_number,
                outcome=AttemptOutcome.SUCCESS,
                result_url=urls[0],
            ))
            self._metrics.increment("catalogmedia.upload_success_total")
            log.info(
                "File uploaded",
                extra={
                    "extra_fields": {
                        "op": "transfer",
                        "file": name,
                        "attempt": attempt_number,
                        "url": urls[0],
                    }
                },
            )
            return TransferOutcome(name=name, attempts=tuple(attempts))

        outcome = TransferOutcome(name=name, attempts=tuple(attempts))
        self._metrics.increment("catalogmedia.upload_failure_total")
        await _call(on_notice, Notice(
            kind=NoticeKind.FAILED,
            file_name=name,
            message=f"{name}: {outcome.error or 'Failed to upload file'}",
            context={"attempts": len(attempts), "error": outcome.error},
        ))
        return outcome

    async def _process_file(
        self,
        file: PendingFile,
        result: UploadResult,
        on_notice: NoticeCallback | None,
    ) -> None:
        rejection = check_file(file, self._config)
        if rejection is not None:
            result.rejected.append(rejection)
            self._metrics.increment(
                "catalogmedia.files_rejected_total",
                tags={"code": rejection.code},
            )
            log.info(
                "File rejected",
                extra={
                    "extra_fields": {
                        "op": "validate",
                        "file": file.name,
                        "code": rejection.code,
                        "reason": rejection.reason,
                    }
                },
            )
            await _call(on_notice, Notice(
                kind=NoticeKind.REJECTED,
                file_name=file.name,
                message=rejection.reason,
                context={"code": rejection.code},
            ))
            return

        payload = await self.prepare(file, on_notice)
        outcome = await self.transfer(payload, on_notice)

        if outcome.succeeded and outcome.url is not None:
            result.succeeded_urls.append(outcome.url)
            result.uploaded.append(UploadedFile(
                name=file.name,
                url=outcome.url,
                attempts=len(outcome.attempts),
            ))
        else:
            result.failed_files.append(FailedFile(
                name=file.name,
                reason=outcome.error or "Failed to upload file",
                attempts=len(outcome.attempts),
            ))

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the transport."""
        await self._transport.close()

    async def __aenter__(self) -> MediaUploader:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
