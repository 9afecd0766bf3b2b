"""Image encoding helpers for reference uploads and generated results."""

import base64
import binascii
import logging
import time
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from .models import ReferenceImage

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:"


def strip_data_url_header(value: str) -> str:
    """Return the base64 payload of a data URL, or ``value`` unchanged.

    >>> strip_data_url_header("data:image/png;base64,AAAA")
    'AAAA'
    """
    if value.startswith(DATA_URL_PREFIX) and "," in value:
        return value.split(",", 1)[1]
    return value


def encode_file_base64(path: str | Path) -> str:
    """Read a file and return its contents as a headerless base64 string.

    Raises:
        OSError: If the file cannot be read
    """
    data = Path(path).read_bytes()
    return base64.b64encode(data).decode("ascii")


def decode_base64(payload: str) -> bytes:
    """Decode a base64 payload, with or without a data-URL header.

    Raises:
        ValueError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(strip_data_url_header(payload), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


def detect_mime_type(path: str | Path) -> str | None:
    """Identify an image's MIME type from its content.

    Uses Pillow rather than the file extension, so a renamed file is
    reported as what it really is.

    Returns:
        MIME type such as ``image/png``, or None if Pillow cannot read it
    """
    try:
        with Image.open(path) as img:
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not identify image {path}: {e}")
        return None


def load_reference_image(path: str | Path) -> ReferenceImage:
    """Describe an uploaded file as a :class:`ReferenceImage`."""
    file_path = Path(path)
    return ReferenceImage(
        path=str(file_path),
        name=file_path.name,
        mime_type=detect_mime_type(file_path),
        size=file_path.stat().st_size,
    )


def save_image(image_url: str, directory: Path, timeout: float = 30.0) -> Path:
    """Persist a generated image so it can be displayed and downloaded.

    Args:
        image_url: ``data:`` URI or http(s) URL returned by the relay
        directory: Destination directory (created if missing)
        timeout: Download timeout for http(s) URLs, in seconds

    Returns:
        Path of the written PNG file

    Raises:
        ValueError: If the URL scheme is unsupported or the data is invalid
        httpx.HTTPError: If downloading an http(s) URL fails
    """
    if image_url.startswith(DATA_URL_PREFIX):
        data = decode_base64(image_url)
    elif image_url.startswith(("http://", "https://")):
        response = httpx.get(image_url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
        data = response.content
    else:
        raise ValueError("Invalid image source")

    directory.mkdir(parents=True, exist_ok=True)
    filepath = directory / f"ai-generated-image-{int(time.time() * 1000)}.png"
    filepath.write_bytes(data)
    logger.info(f"Saved generated image to {filepath}")
    return filepath
