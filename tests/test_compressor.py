from __future__ import annotations

import io

import pytest

pytest.importorskip("pyvips")

from photo_session.errors import ImageDecodeError
from photo_session.image_engine.decoder import WorkingImage, decode_image_bytes
from photo_session.ops.compressor import (
    CompressionResult,
    compress_image,
    format_size,
    quality_to_q,
    reduction_percent,
)


def test_format_size() -> None:
    assert format_size(0) == "0B"
    assert format_size(512) == "512.0 B"
    assert format_size(2048) == "2.0 KB"
    with pytest.raises(ValueError):
        format_size(-1)


def test_reduction_guarded_against_zero() -> None:
    assert reduction_percent(0, 1234) == 0.0
    assert reduction_percent(200, 50) == 75.0
    # growth reports a negative reduction
    assert reduction_percent(100, 150) == -50.0


def test_quality_mapping() -> None:
    assert quality_to_q(0.92) == 92
    assert quality_to_q(1.0) == 100
    assert quality_to_q(0.0) == 1
    with pytest.raises(ValueError):
        quality_to_q(1.5)
    with pytest.raises(ValueError):
        quality_to_q(float("nan"))


def test_compress_produces_jpeg(make_noise_png) -> None:
    Image = pytest.importorskip("PIL.Image")

    image = decode_image_bytes(make_noise_png(96, 64))
    result = compress_image(image, 0.92)

    assert result.original_size == len(image.data)
    assert result.compressed_size == len(result.image.data)
    assert result.quality == 0.92
    assert (result.image.width, result.image.height) == (96, 64)
    assert result.reduction == pytest.approx(
        (result.original_size - result.compressed_size) / result.original_size * 100
    )

    with Image.open(io.BytesIO(result.image.data)) as im:
        assert im.format == "JPEG"
        assert im.size == (96, 64)


def test_lower_quality_is_smaller(make_noise_png) -> None:
    image = decode_image_bytes(make_noise_png(128, 128))
    high = compress_image(image, 0.95)
    low = compress_image(image, 0.2)
    assert low.compressed_size < high.compressed_size
    assert low.reduction > high.reduction


def test_zero_original_size_reports_zero(make_png) -> None:
    image = decode_image_bytes(make_png(16, 16))
    result = compress_image(image, 0.92, original_size=0)
    assert result.original_size == 0
    assert result.reduction == 0


def test_summary_text() -> None:
    result = CompressionResult(
        original_size=2048,
        compressed_size=512,
        image=WorkingImage(b"x" * 512, 1, 1, "jpeg"),
        quality=0.92,
    )
    assert result.summary() == "Original: 2.00 KB\nCompressed: 0.50 KB\nReduced: 75.00%"


def test_compress_undecodable_image_is_fatal() -> None:
    bogus = WorkingImage(b"not an image at all", 10, 10, "png")
    with pytest.raises(ImageDecodeError):
        compress_image(bogus, 0.5)
