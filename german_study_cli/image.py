"""Image preparation for vision requests."""

import base64
import io
import logging
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ImageProcessingError

logger = logging.getLogger(__name__)

MAX_WIDTH = 800
JPEG_QUALITY = 70
MEDIA_TYPE = "image/jpeg"


@dataclass(frozen=True)
class EncodedImage:
    """A downscaled JPEG copy of a source image, ready to embed in a request."""

    data: str
    path: Path
    width: int
    height: int
    media_type: str = MEDIA_TYPE

    @property
    def data_uri(self) -> str:
        """Inline data URI for providers that take images as URLs."""
        return f"data:{self.media_type};base64,{self.data}"


def transform_image(
    image_reference: Union[str, Path], output_dir: Optional[Union[str, Path]] = None
) -> EncodedImage:
    """
    Downscale an image and re-encode it as JPEG.

    Images wider than MAX_WIDTH are resized to that width with the height
    scaled proportionally; narrower images keep their size. The result is
    always a JPEG, whatever the input format.

    Args:
        image_reference: Path to the source image
        output_dir: Directory for the resized copy (default: system temp dir)

    Returns:
        EncodedImage with base64 data and the path of the resized copy

    Raises:
        ImageProcessingError: If the source cannot be read or re-encoded
    """
    source = Path(image_reference).expanduser()
    target_dir = Path(output_dir) if output_dir else Path(tempfile.gettempdir())

    try:
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)

            if img.width > MAX_WIDTH:
                height = max(1, round(img.height * MAX_WIDTH / img.width))
                img = img.resize((MAX_WIDTH, height), Image.LANCZOS)

            if img.mode != "RGB":
                img = img.convert("RGB")

            buffer = io.BytesIO()
            img.save(buffer, format="JPEG", quality=JPEG_QUALITY)
            width, height = img.size
    except (FileNotFoundError, UnidentifiedImageError, Image.DecompressionBombError) as e:
        logger.warning("Cannot read image %s: %s", source, e)
        raise ImageProcessingError(f"Cannot read image {source}: {e}") from e
    except (OSError, ValueError) as e:
        logger.warning("Cannot transcode image %s: %s", source, e)
        raise ImageProcessingError(f"Cannot transcode image {source}: {e}") from e

    raw = buffer.getvalue()
    scaled_path = target_dir / f"{uuid.uuid4().hex}.jpg"
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        scaled_path.write_bytes(raw)
    except OSError as e:
        raise ImageProcessingError(
            f"Cannot write resized image to {target_dir}: {e}"
        ) from e

    logger.debug(
        "Resized %s to %dx%d (%d bytes) at %s", source, width, height, len(raw), scaled_path
    )

    return EncodedImage(
        data=base64.b64encode(raw).decode("utf-8"),
        path=scaled_path,
        width=width,
        height=height,
    )
