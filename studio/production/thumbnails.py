"""
Thumbnail generation for uploaded production images.
Uses Pillow with in-memory buffers; output is a progressive JPEG.
"""
import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = (300, 300)
THUMBNAIL_QUALITY = 85


def generate_thumbnail(
    image_bytes: bytes,
    size: tuple = THUMBNAIL_SIZE,
    quality: int = THUMBNAIL_QUALITY,
) -> bytes:
    """
    Crop-to-fill an image to ``size`` around its centre and encode as JPEG.

    Raises ValueError when the bytes are not a readable image.
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode not in ('RGB', 'L'):
                img = img.convert('RGB')
            thumb = ImageOps.fit(img, size, method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))
            buffer = io.BytesIO()
            thumb.save(buffer, format='JPEG', quality=quality, progressive=True, optimize=True)
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f'Cannot generate thumbnail: {e}') from e


def thumbnail_name(file_name: str) -> str:
    stem = file_name.rsplit('.', 1)[0] if '.' in file_name else file_name
    return f'thumb_{stem}.jpg'


def try_generate_thumbnail(image_bytes: bytes, file_name: str) -> Optional[bytes]:
    """Thumbnail bytes, or None when generation fails"""
    try:
        return generate_thumbnail(image_bytes)
    except ValueError as e:
        logger.warning(f"Thumbnail generation failed for {file_name}: {e}")
        return None
