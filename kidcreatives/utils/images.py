"""Image processing utilities for uploaded drawings and generated images."""

import base64
import binascii
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .logger import get_logger
from .errors import ImageProcessingError

logger = get_logger(__name__)

FORMAT_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


def split_data_url(value: str) -> Tuple[str, Optional[str]]:
    """
    Separate a data URL into its base64 payload and MIME type.

    Plain base64 strings are returned unchanged with no MIME type.
    """
    if value.startswith("data:") and "," in value:
        header, payload = value.split(",", 1)
        mime_type = header[len("data:"):].split(";")[0] or None
        return payload, mime_type
    return value, None


def base64_to_bytes(base64_string: str) -> bytes:
    """
    Convert base64 string (or data URL) to bytes.

    Args:
        base64_string: Base64 encoded image

    Returns:
        Image bytes

    Raises:
        ImageProcessingError: If the payload is not valid base64
    """
    payload, _ = split_data_url(base64_string)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageProcessingError(f"Invalid base64 image data: {e}") from e


def bytes_to_base64(image_bytes: bytes) -> str:
    """Convert image bytes to base64 string."""
    return base64.b64encode(image_bytes).decode('utf-8')


def image_to_data_url(image_b64: str, mime_type: str) -> str:
    """Convert base64 image bytes to a data URL for display."""
    return f"data:{mime_type};base64,{image_b64}"


def detect_mime_type(image_bytes: bytes, default: str = "image/jpeg") -> str:
    """
    Detect the MIME type of an image with Pillow.

    Args:
        image_bytes: Raw image bytes
        default: MIME type used when Pillow knows the image but not its MIME type

    Returns:
        MIME type string

    Raises:
        ImageProcessingError: If the bytes are not a readable image
    """
    try:
        image = Image.open(BytesIO(image_bytes))
        image_format = image.format
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Failed to read image: {e}") from e

    return FORMAT_MIME_TYPES.get(image_format or "", default)


def guess_mime_type(image_b64: str, default: str = "image/png") -> str:
    """Like detect_mime_type for base64 input, but returns ``default`` on any failure."""
    try:
        return detect_mime_type(base64_to_bytes(image_b64), default=default)
    except ImageProcessingError:
        return default


def resize_if_needed(
    image_bytes: bytes,
    max_width: int = 2048,
    max_height: int = 2048
) -> bytes:
    """
    Resize image if it exceeds maximum dimensions.

    Args:
        image_bytes: Raw image bytes
        max_width: Maximum width in pixels
        max_height: Maximum height in pixels

    Returns:
        Resized image bytes (or original if no resize needed)
    """
    try:
        image = Image.open(BytesIO(image_bytes))
        width, height = image.size

        if width <= max_width and height <= max_height:
            return image_bytes

        ratio = min(max_width / width, max_height / height)
        new_width = int(width * ratio)
        new_height = int(height * ratio)

        logger.info(
            f"Resizing drawing from {width}x{height} to {new_width}x{new_height}",
            extra={
                "original_width": width,
                "original_height": height,
                "new_width": new_width,
                "new_height": new_height,
            }
        )

        resized_image = image.resize((new_width, new_height), Image.LANCZOS)

        buffer = BytesIO()
        resized_image.save(buffer, format=image.format)
        return buffer.getvalue()

    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Failed to resize image: {e}. Using original.")
        return image_bytes


def prepare_upload(
    image_data: str,
    mime_type: Optional[str] = None,
    default_mime_type: str = "image/jpeg",
) -> Tuple[str, str]:
    """
    Normalize an uploaded drawing for the workflow.

    Accepts plain base64 or a data URL, validates it is a readable image,
    shrinks oversized uploads and resolves its MIME type.

    Args:
        image_data: Base64 payload or data URL
        mime_type: MIME type supplied by the client, if any
        default_mime_type: Fallback when nothing else identifies the type

    Returns:
        Tuple of (base64 payload, mime type)

    Raises:
        ImageProcessingError: If the upload is not a readable image
    """
    _, url_mime_type = split_data_url(image_data)
    image_bytes = base64_to_bytes(image_data)
    if not image_bytes:
        raise ImageProcessingError("Uploaded image is empty")

    detected = detect_mime_type(image_bytes, default=mime_type or url_mime_type or default_mime_type)
    image_bytes = resize_if_needed(image_bytes)

    logger.info(
        "Prepared uploaded drawing",
        extra={"mime_type": detected, "size_kb": len(image_bytes) / 1024}
    )

    return bytes_to_base64(image_bytes), detected
