"""Validation and storage of variation images and videos."""
import io
import logging
import uuid
from urllib.parse import urlsplit

from flask import current_app
from PIL import Image as PILImage
from werkzeug.utils import secure_filename

from babyshop.errors import MediaError
from babyshop.services import storage_service

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
ALLOWED_VIDEO_TYPES = {"video/mp4", "video/webm", "video/quicktime"}
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_VIDEO_SIZE = 100 * 1024 * 1024  # 100 MB


def media_type_for(content_type):
    """Videos by MIME prefix, everything else is treated as an image."""
    if content_type and content_type.startswith("video/"):
        return "video"
    return "image"


def validate_image(image_bytes):
    """Validate and sanitize an uploaded image.

    - Checks file size
    - Verifies it's a real image via Pillow
    - Strips EXIF data by re-encoding
    - Converts to JPEG

    Returns:
        Sanitized JPEG bytes

    Raises:
        MediaError on invalid input
    """
    if len(image_bytes) > MAX_IMAGE_SIZE:
        raise MediaError(
            f"Image too large: {len(image_bytes)} bytes (max {MAX_IMAGE_SIZE})"
        )

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()
    except Exception:
        raise MediaError("Invalid image file")

    # verify() leaves the image unusable, open it again to re-encode
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def validate_video(video_bytes, content_type):
    if content_type not in ALLOWED_VIDEO_TYPES:
        raise MediaError(f"Unsupported video type: {content_type}")
    if len(video_bytes) > MAX_VIDEO_SIZE:
        raise MediaError(
            f"Video too large: {len(video_bytes)} bytes (max {MAX_VIDEO_SIZE})"
        )
    if not video_bytes:
        raise MediaError("Empty video file")
    return video_bytes


def normalize_media_url(url):
    """Validate a directly supplied media link."""
    if not url or not isinstance(url, str):
        raise MediaError("Please enter a valid URL")

    candidate = url.strip()
    parts = urlsplit(candidate)
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise MediaError("Please enter a valid URL")
    if parts.username or parts.password:
        raise MediaError("Media URL must not include credentials")
    return candidate


def build_storage_key(filename, media_type):
    prefix = current_app.config["MEDIA_KEY_PREFIX"]
    name = secure_filename(filename or "") or "upload"
    if media_type == "image":
        # Images are re-encoded, the stored object is always JPEG
        stem = name.rsplit(".", 1)[0] or "upload"
        name = f"{stem}.jpg"
    return f"{prefix}/{uuid.uuid4().hex}-{name}"


def store_upload(media):
    """Validate a pending upload, push it to the blob store.

    Returns ``(storage_key, public_url)``.
    """
    if media.media_type == "video":
        data = validate_video(media.data, media.content_type)
        content_type = media.content_type
    else:
        if media.content_type and media.content_type not in ALLOWED_IMAGE_TYPES:
            raise MediaError(f"Unsupported image type: {media.content_type}")
        data = validate_image(media.data)
        content_type = "image/jpeg"

    storage_key = build_storage_key(media.filename, media.media_type)
    storage_service.upload(storage_key, data, content_type=content_type)
    logger.info("Uploaded variation %s to %s", media.media_type, storage_key)
    return storage_key, storage_service.get_public_url(storage_key)
