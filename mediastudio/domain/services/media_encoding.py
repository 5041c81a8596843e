from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from mediastudio.domain.entities.artifact import ArtifactRef

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=-]+)*;base64,(?P<data>.*)$", re.S)

ACCEPTED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/webp")

# Pillow format name -> MIME type
_FORMAT_MIME = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}


@dataclass(frozen=True)
class ImageInfo:
    width: int
    height: int
    mime_type: str


class MediaEncoding:
    """Conversions between binary media and its transportable base64 form.

    Stateless; every method is a static helper.
    """

    @staticmethod
    def encode(data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def decode(encoded: str) -> bytes:
        """Decode a base64 payload or a ``data:`` URL.

        Raises:
            ValueError: if the text is not valid base64.
        """
        match = _DATA_URL_RE.match(encoded.strip())
        payload = match.group("data") if match else encoded
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Invalid base64 string") from exc

    @staticmethod
    def to_data_url(artifact: ArtifactRef) -> str:
        return f"data:{artifact.mime_type};base64,{artifact.data}"

    @staticmethod
    def from_data_url(data_url: str) -> ArtifactRef:
        match = _DATA_URL_RE.match(data_url.strip())
        if not match or not match.group("mime"):
            raise ValueError("Invalid base64 string")
        # re-validate the payload
        MediaEncoding.decode(match.group("data"))
        return ArtifactRef(data=match.group("data"), mime_type=match.group("mime"))

    @staticmethod
    def probe(data: bytes) -> ImageInfo:
        """Identify an image with Pillow.

        Raises:
            ValueError: if the bytes are not a readable image.
        """
        try:
            with Image.open(BytesIO(data)) as img:
                img.verify()
                fmt = img.format or ""
                width, height = img.size
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ValueError("Data is not a readable image") from exc
        mime = _FORMAT_MIME.get(fmt.upper(), f"image/{fmt.lower() or 'octet-stream'}")
        return ImageInfo(width=width, height=height, mime_type=mime)

    @classmethod
    def artifact_from_file(cls, path: str | Path) -> ArtifactRef:
        """Read an image file into an artifact, sniffing its MIME type."""
        path = Path(path)
        data = path.read_bytes()
        try:
            mime_type = cls.probe(data).mime_type
        except ValueError:
            mime_type = mimetypes.guess_type(path.name)[0]
            if mime_type is None:
                raise
        if mime_type not in ACCEPTED_IMAGE_TYPES:
            raise ValueError(f"Unsupported image type: {mime_type}")
        return ArtifactRef(data=cls.encode(data), mime_type=mime_type)

    @classmethod
    def write_file(cls, artifact: ArtifactRef, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(cls.decode(artifact.data))
        return path

    # numpy helpers follow the [0, 1] float32 RGB convention of ProcessingService

    @classmethod
    def to_array(cls, artifact: ArtifactRef) -> np.ndarray:
        img = Image.open(BytesIO(cls.decode(artifact.data))).convert("RGB")
        return np.asarray(img).astype(np.float32) / 255.0

    @classmethod
    def from_array(cls, array: np.ndarray, mime_type: str = "image/png") -> ArtifactRef:
        arr = np.clip(array, 0.0, 1.0)
        pil_arr = (arr if arr.ndim == 2 else arr[..., :3]) * 255.0
        img = Image.fromarray(np.round(pil_arr).astype("uint8"))
        fmt = "JPEG" if mime_type == "image/jpeg" else "PNG"
        buf = BytesIO()
        img.save(buf, format=fmt, quality=95)
        return ArtifactRef(data=cls.encode(buf.getvalue()), mime_type=f"image/{fmt.lower()}")
