"""Property-based tests for catalogmedia using Hypothesis.

These tests verify invariants of the geometry, validation, retry and
batch-accounting logic across a wide range of generated inputs.  They
complement the example-based unit tests.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

from hypothesis import given, settings
from hypothesis import strategies as st

from catalogmedia.config import UploaderConfig
from catalogmedia.errors import UploadNetworkError, UploadTransportError
from catalogmedia.media.normalize import compute_square_geometry
from catalogmedia.media.validate import check_file
from catalogmedia.models import PendingFile
from catalogmedia.storage.retries import compute_backoff, is_retryable
from catalogmedia.uploader import MediaUploader
from catalogmedia.utils.sizes import format_file_size

# ---------------------------------------------------------------------------
# Reusable strategies
# ---------------------------------------------------------------------------

_dims_st = st.integers(min_value=1, max_value=20_000)
_edge_st = st.integers(min_value=1, max_value=4096)
_status_st = st.integers(min_value=100, max_value=599)


class _ScriptedTransport:
    """Transport that replays a fixed list of outcomes for every file."""

    def __init__(self, outcomes: list) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    async def send(self, payload):
        outcome = self._outcomes[self.calls]
        self.calls += 1
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        pass


def _video(name: str = "tour.mp4") -> PendingFile:
    return PendingFile(name=name, mime_type="video/mp4", data=b"\x00" * 16)


# ---------------------------------------------------------------------------
# 1. Geometry
# ---------------------------------------------------------------------------


class TestSquareGeometryProperties:
    """Property-based tests for :func:`compute_square_geometry`."""

    @given(width=_dims_st, height=_dims_st, max_edge=_edge_st)
    def test_side_is_shorter_scaled_edge(self, width, height, max_edge):
        geo = compute_square_geometry(width, height, max_edge)
        assert geo.side == min(geo.scaled_width, geo.scaled_height)

    @given(width=_dims_st, height=_dims_st, max_edge=_edge_st)
    def test_output_never_exceeds_max_edge(self, width, height, max_edge):
        geo = compute_square_geometry(width, height, max_edge)
        assert max(geo.scaled_width, geo.scaled_height) <= max(max_edge, 1)
        assert 1 <= geo.side <= max_edge

    @given(width=_dims_st, height=_dims_st, max_edge=_edge_st)
    def test_longer_edge_hits_limit_when_scaled(self, width, height, max_edge):
        geo = compute_square_geometry(width, height, max_edge)
        if max(width, height) > max_edge:
            assert max(geo.scaled_width, geo.scaled_height) == max_edge
        else:
            assert (geo.scaled_width, geo.scaled_height) == (width, height)

    @given(width=_dims_st, height=_dims_st, max_edge=_edge_st)
    def test_box_is_centered_and_inside(self, width, height, max_edge):
        geo = compute_square_geometry(width, height, max_edge)
        left, top, right, bottom = geo.box
        assert right - left == bottom - top == geo.side
        assert 0 <= left and 0 <= top
        assert right <= geo.scaled_width and bottom <= geo.scaled_height
        assert abs(left - (geo.scaled_width - right)) <= 1
        assert abs(top - (geo.scaled_height - bottom)) <= 1


# ---------------------------------------------------------------------------
# 2. Validation
# ---------------------------------------------------------------------------


class TestValidationProperties:
    """Size and type checks for :func:`check_file`."""

    @given(
        size=st.integers(min_value=0, max_value=4096),
        limit=st.integers(min_value=1, max_value=4096),
    )
    def test_size_boundary(self, size, limit):
        cfg = UploaderConfig(max_file_size_bytes=limit)
        file = PendingFile("a.mp4", "video/mp4", b"", size_bytes=size)
        rejected = check_file(file, cfg) is not None
        assert rejected == (size > limit)

    @given(subtype=st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-+.", max_size=20))
    def test_image_and_video_always_accepted(self, subtype):
        cfg = UploaderConfig()
        for family in ("image", "video", "IMAGE", "Video"):
            file = PendingFile("a", f"{family}/{subtype}", b"x")
            assert check_file(file, cfg) is None

    @given(family=st.sampled_from(["application", "text", "audio", "font", "model"]))
    def test_other_families_rejected(self, family):
        assert check_file(PendingFile("a", f"{family}/x", b"x"), UploaderConfig()) is not None


# ---------------------------------------------------------------------------
# 3. Retry classification and attempt accounting
# ---------------------------------------------------------------------------


class TestRetryProperties:
    """Properties of :func:`is_retryable` and the transfer loop."""

    @given(status=_status_st)
    def test_status_classification(self, status):
        err = UploadTransportError(
            message=f"Upload failed with status {status}",
            context={"status_code": status},
        )
        assert is_retryable(err) == (status in {503, 504, 544})

    @settings(max_examples=50)
    @given(
        max_attempts=st.integers(min_value=1, max_value=6),
        failures=st.integers(min_value=0, max_value=8),
    )
    def test_attempts_never_exceed_maximum(self, max_attempts, failures):
        cfg = UploaderConfig(retry_max_attempts=max_attempts)
        outcomes = [UploadNetworkError(message="timed out")] * failures + [["https://a"]]
        transport = _ScriptedTransport(outcomes)
        uploader = MediaUploader(cfg, transport=transport)

        with patch("catalogmedia.uploader.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = asyncio.run(uploader.upload_batch([_video()]))

        assert transport.calls == min(failures + 1, max_attempts)
        assert result.ok == (failures < max_attempts)
        expected_sleeps = [
            compute_backoff(n, cfg.retry_base_delay)
            for n in range(1, transport.calls)
        ]
        assert [c.args[0] for c in sleep.await_args_list] == expected_sleeps


# ---------------------------------------------------------------------------
# 4. Batch accounting
# ---------------------------------------------------------------------------


class TestBatchProperties:
    @settings(max_examples=30)
    @given(plan=st.lists(st.sampled_from(["ok", "fail", "reject"]), max_size=8))
    def test_every_file_lands_in_exactly_one_bucket(self, plan):
        files = []
        outcomes: dict[str, list] = {}
        for index, kind in enumerate(plan):
            name = f"v{index}.mp4"
            if kind == "reject":
                files.append(PendingFile(name, "application/pdf", b"x"))
                continue
            files.append(_video(name))
            outcomes[name] = (
                [[f"https://cdn/{name}"]] if kind == "ok"
                else [UploadTransportError(message="Upload failed with status 400")]
            )

        class ByName:
            async def send(self, payload):
                outcome = outcomes[payload.source_name].pop(0)
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome

            async def close(self):
                pass

        result = asyncio.run(MediaUploader(transport=ByName()).upload_batch(files))
        assert len(result.succeeded_urls) == plan.count("ok")
        assert len(result.failed_files) == plan.count("fail")
        assert len(result.rejected) == plan.count("reject")


# ---------------------------------------------------------------------------
# 5. Formatting
# ---------------------------------------------------------------------------


class TestFormatFileSizeProperties:
    @given(size=st.integers(min_value=1, max_value=1024 ** 4))
    def test_unit_and_shape(self, size):
        text = format_file_size(size)
        number, unit = text.split(" ")
        assert unit in {"Bytes", "KB", "MB", "GB"}
        assert not number.endswith(".0")
        assert float(number) > 0
