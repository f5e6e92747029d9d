import numpy as np
import pytest

pytest.importorskip("pyvips")

from photo_session.edit_state import EditState
from photo_session.errors import ImageDecodeError, ImageEncodeError
from photo_session.image_engine.decoder import (
    decode_image_bytes,
    encode_png,
    from_array,
    to_rgb_array,
)
from photo_session.image_engine.render import adjust_colors, render_adjusted, saturate_matrix


def test_decode_image_bytes_reads_size(make_png):
    image = decode_image_bytes(make_png(33, 21))
    assert (image.width, image.height) == (33, 21)
    assert image.byte_size == len(image.data)
    assert image.format == "png"


@pytest.mark.parametrize("data", [b"", b"garbage bytes"])
def test_decode_image_bytes_rejects_bad_input(data):
    with pytest.raises(ImageDecodeError):
        decode_image_bytes(data)


def test_array_round_trip_is_lossless():
    arr = np.arange(5 * 7 * 3, dtype=np.uint8).reshape(5, 7, 3)
    image = decode_image_bytes(encode_png(from_array(arr)))
    assert image.data.startswith(b"\x89PNG")
    assert (image.width, image.height) == (7, 5)
    assert np.array_equal(to_rgb_array(image.data), arr)


def test_saturate_matrix_identity_and_grey():
    assert np.allclose(saturate_matrix(1.0), np.eye(3))
    grey = saturate_matrix(0.0)
    # every output channel is the same luma mix
    assert np.allclose(grey[0], grey[1])
    assert np.allclose(grey[0].sum(), 1.0)


def test_adjust_colors():
    rgb = np.array([[[100, 150, 200]]], dtype=np.uint8)
    assert np.array_equal(adjust_colors(rgb, 100, 100, 100), rgb)
    assert tuple(adjust_colors(rgb, 200, 100, 100)[0, 0]) == (200, 255, 255)
    # contrast 0 collapses everything to mid grey
    assert tuple(adjust_colors(rgb, 100, 0, 100)[0, 0]) == (128, 128, 128)
    out = adjust_colors(rgb, 100, 100, 0)[0, 0]
    assert out[0] == out[1] == out[2]


def test_render_applies_flips_and_quarter_turns(make_png):
    source = decode_image_bytes(make_png(40, 20))
    src = to_rgb_array(source.data)

    flipped = render_adjusted(source, EditState(flip_x=-1))
    assert np.array_equal(to_rgb_array(flipped.data), src[:, ::-1])

    turned = render_adjusted(source, EditState(rotation=90))
    assert (turned.width, turned.height) == (20, 40)

    # 450 degrees wraps to a quarter turn visually
    wrapped = render_adjusted(source, EditState(rotation=450))
    assert wrapped.data == turned.data


def test_render_arbitrary_angle_grows_canvas(make_png):
    source = decode_image_bytes(make_png(40, 40))
    out = render_adjusted(source, EditState(rotation=45))
    assert out.width > 40
    assert out.height > 40


def test_render_defaults_keep_pixels(make_png):
    source = decode_image_bytes(make_png(12, 9))
    out = render_adjusted(source, EditState())
    assert np.array_equal(to_rgb_array(out.data), to_rgb_array(source.data))


def test_render_reports_geometry_failure_as_encode_error(make_png):
    image = decode_image_bytes(make_png(8, 6))
    state = EditState()
    # bypasses the setter validation on purpose
    state.rotation = float("nan")
    with pytest.raises(ImageEncodeError):
        render_adjusted(image, state)
