import io
import logging
import os
import shutil

from PIL import Image, UnidentifiedImageError

from training_tracker.config import Config

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

class AvatarError(ValueError):
    pass

def validate_avatar(content_type: str, data: bytes, max_bytes: int = None) -> str:
    """Check type, size and that the payload really is an image. Returns the file extension."""
    max_bytes = Config.AVATAR_MAX_BYTES if max_bytes is None else max_bytes
    if content_type not in ALLOWED_TYPES:
        raise AvatarError("Invalid file type. Only JPG, PNG, and WebP are allowed.")
    if len(data) > max_bytes:
        raise AvatarError(f"File size must be less than {max_bytes // 1024} KB.")
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
    except (UnidentifiedImageError, OSError) as exc:
        raise AvatarError("Uploaded file is not a valid image.") from exc
    return ALLOWED_TYPES[content_type]

def save_avatar(user_id: str, content_type: str, data: bytes, base_dir: str = None) -> str:
    """Replace the user's avatar file and return its public URL path."""
    extension = validate_avatar(content_type, data)
    base_dir = base_dir or Config.AVATAR_DIR
    user_dir = os.path.join(base_dir, user_id)

    # One avatar per user: drop whatever was uploaded before
    if os.path.isdir(user_dir):
        shutil.rmtree(user_dir)
    os.makedirs(user_dir, exist_ok=True)

    file_name = f"avatar.{extension}"
    with open(os.path.join(user_dir, file_name), "wb") as f:
        f.write(data)
    logger.info("Stored avatar for user %s (%d bytes)", user_id, len(data))
    return f"/avatars/{user_id}/{file_name}"
