"""Photo optimization applied before a pet photo is uploaded."""

import logging
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image

from carelog.configs import PHOTO_CONFIG

logger = logging.getLogger(__name__)


def optimize_image(
    data: bytes,
    max_width: int = PHOTO_CONFIG["max_width"],
    max_height: int = PHOTO_CONFIG["max_height"],
    quality: int = PHOTO_CONFIG["quality"],
) -> Optional[Tuple[bytes, str]]:
    """
    Optimize image by converting to WebP format and resizing if necessary.

    Args:
        data: Raw image bytes as chosen by the user
        max_width: Maximum width for the image (default: 1920)
        max_height: Maximum height for the image (default: 1920)
        quality: WebP quality (0-100, default: 85)

    Returns:
        Tuple of (optimized bytes, content_type) or None if the data could not be processed
    """
    try:
        image = Image.open(BytesIO(data))
        image.load()

        # Flatten transparency onto white
        if image.mode in ("RGBA", "LA", "P"):
            if image.mode == "P":
                image = image.convert("RGBA")
            rgb_image = Image.new("RGB", image.size, (255, 255, 255))
            rgb_image.paste(image, mask=image.split()[-1])
            image = rgb_image
        elif image.mode != "RGB":
            image = image.convert("RGB")

        if image.width > max_width or image.height > max_height:
            image.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)

        output = BytesIO()
        image.save(output, format="WEBP", quality=quality, method=6)
        return output.getvalue(), "image/webp"
    except Exception as e:
        logger.warning(f"Failed to optimize image: {e}", exc_info=True)
        return None
