import numpy as np
import pytest

from mediastudio.domain.entities.artifact import ArtifactRef
from mediastudio.domain.services.media_encoding import MediaEncoding


def test_decode_accepts_data_url_and_plain_base64():
    plain = MediaEncoding.encode(b"hello")
    assert MediaEncoding.decode(plain) == b"hello"
    assert MediaEncoding.decode(f"data:image/png;base64,{plain}") == b"hello"


def test_decode_rejects_garbage():
    with pytest.raises(ValueError, match="Invalid base64 string"):
        MediaEncoding.decode("not base64!!")


def test_data_url_round_trip_keeps_mime():
    art = ArtifactRef(MediaEncoding.encode(b"\x89PNG"), "image/webp")
    url = MediaEncoding.to_data_url(art)
    assert url.startswith("data:image/webp;base64,")
    assert MediaEncoding.from_data_url(url) == art


def test_from_data_url_requires_mime():
    with pytest.raises(ValueError):
        MediaEncoding.from_data_url("aGVsbG8=")


def test_probe_sniffs_png(png_bytes):
    info = MediaEncoding.probe(png_bytes(w=6, h=3))
    assert (info.width, info.height, info.mime_type) == (6, 3, "image/png")


def test_probe_rejects_non_image():
    with pytest.raises(ValueError, match="not a readable image"):
        MediaEncoding.probe(b"plain text")


def test_artifact_size_is_decoded_length():
    for n in range(1, 8):
        assert ArtifactRef(MediaEncoding.encode(b"x" * n)).size == n


def test_artifact_from_file(tmp_path, png_bytes):
    path = tmp_path / "photo.bin"
    path.write_bytes(png_bytes())
    art = MediaEncoding.artifact_from_file(path)
    assert art.mime_type == "image/png"
    assert MediaEncoding.decode(art.data) == png_bytes()


def test_artifact_from_file_rejects_unsupported_type(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(ValueError):
        MediaEncoding.artifact_from_file(path)


def test_array_conversion(artifact):
    arr = MediaEncoding.to_array(artifact(color=(255, 0, 0)))
    assert arr.shape == (4, 4, 3)
    assert arr.dtype == np.float32
    assert np.allclose(arr[0, 0], [1.0, 0.0, 0.0])
    back = MediaEncoding.from_array(arr)
    assert back.mime_type == "image/png"
    assert np.allclose(MediaEncoding.to_array(back), arr)
