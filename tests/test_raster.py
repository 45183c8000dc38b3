import numpy as np
import pytest

from fractalmarch.errors import ResourceError
from fractalmarch.raster import pam_header, read_pam, write_frame


def _pixels(h=3, w=5):
    return np.arange(h * w * 4, dtype=np.uint8).reshape(h, w, 4)


def test_pam_header_fields():
    assert pam_header(960, 540) == (
        b"P7\nWIDTH 960\nHEIGHT 540\nDEPTH 4\nMAXVAL 255\nTUPLTYPE RGB_ALPHA\nENDHDR\n"
    )


def test_pam_payload_is_row_major_rgba(tmp_path):
    pixels = _pixels()
    path = write_frame(str(tmp_path / "f.pam"), pixels)
    with open(path, "rb") as f:
        data = f.read()
    header = pam_header(5, 3)
    assert data.startswith(header)
    assert len(data) - len(header) == 5 * 3 * 4
    assert data[len(header):] == pixels.tobytes()
    _, back = read_pam(path)
    assert np.array_equal(back, pixels)


def test_rejects_wrong_pixel_layout(tmp_path):
    with pytest.raises(ValueError):
        write_frame(str(tmp_path / "f.pam"), np.zeros((3, 5, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        write_frame(str(tmp_path / "f.pam"), np.zeros((3, 5, 4), dtype=np.float32))
    with pytest.raises(ValueError):
        write_frame(str(tmp_path / "f.bmp"), _pixels(), fmt="bmp")


def test_missing_directory_is_resource_error(tmp_path):
    with pytest.raises(ResourceError) as exc:
        write_frame(str(tmp_path / "nope" / "f.pam"), _pixels(), frame_index=12)
    assert exc.value.frame_index == 12
    assert "frame 12" in str(exc.value)
    assert isinstance(exc.value.cause, OSError)


def test_read_pam_detects_truncation(tmp_path):
    path = tmp_path / "short.pam"
    path.write_bytes(pam_header(2, 2) + b"\x00" * 10)
    with pytest.raises(ValueError):
        read_pam(str(path))
