"""EXIF metadata extraction plugin for Semantic Kernel."""

import importlib.util
import logging
import math
from datetime import datetime
from fractions import Fraction
from io import BytesIO
from typing import Any, Dict

from semantic_kernel.functions import kernel_function

from ..models.verification import ImageMetadata
from ..utils.errors import MetadataReadError

logger = logging.getLogger(__name__)

EXIF_IFD = 0x8769
GPS_IFD = 0x8825

# Capture time candidates, most specific first
CAPTURE_TAGS = ("DateTimeOriginal", "DateTime", "DateTimeDigitized")

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


class EXIFReaderPlugin:
    """
    Semantic Kernel plugin for extracting EXIF metadata from images.

    Decodes every readable tag from the base IFD, the Exif sub-IFD and the
    GPS sub-IFD using PIL (Pillow), and resolves the capture time.
    """

    def __init__(self):
        """Initialize EXIF reader plugin."""
        self._validate_dependencies()
        logger.info("Initialized EXIFReaderPlugin")

    def _validate_dependencies(self):
        """Validate that required libraries are available."""
        if importlib.util.find_spec("PIL") is None:
            raise ImportError(
                "PIL (Pillow) is required for EXIF extraction. "
                "Install it: pip install Pillow"
            )

    @kernel_function(
        name="extract_image_metadata",
        description=(
            "Extract EXIF metadata from an image, including the capture "
            "timestamp used to check photo recency against a claim date."
        )
    )
    def extract_metadata(self, image_bytes: bytes, filename: str = "image") -> ImageMetadata:
        """
        Extract EXIF metadata from an image.

        Args:
            image_bytes: Raw image bytes
            filename: Upload name, used in logs and errors

        Returns:
            ImageMetadata with JSON-safe tags and the capture time, if any

        Raises:
            MetadataReadError: If the bytes cannot be decoded as an image
        """
        try:
            from PIL import Image
            from PIL.ExifTags import GPSTAGS, TAGS

            with Image.open(BytesIO(image_bytes)) as image:
                metadata = ImageMetadata(
                    width=image.width,
                    height=image.height,
                    format=image.format
                )
                exif_data = image.getexif()

                tags: Dict[str, Any] = {}
                for tag_id, value in exif_data.items():
                    tags[TAGS.get(tag_id, str(tag_id))] = self._json_safe(value)

                for tag_id, value in exif_data.get_ifd(EXIF_IFD).items():
                    tags[TAGS.get(tag_id, str(tag_id))] = self._json_safe(value)

                gps_ifd = exif_data.get_ifd(GPS_IFD)
                if gps_ifd:
                    tags['GPSInfo'] = {
                        GPSTAGS.get(tag_id, str(tag_id)): self._json_safe(value)
                        for tag_id, value in gps_ifd.items()
                    }

        except Exception as e:
            logger.error(f"Failed to read image metadata from {filename}: {str(e)}")
            raise MetadataReadError.build(
                f"EXIF extraction failed for '{filename}': {str(e)}",
                error=e,
                filename=filename
            ) from e

        metadata.tags = tags
        metadata.capture_tag, metadata.capture_time = self._resolve_capture_time(tags)

        if not metadata.has_exif:
            logger.info(f"No EXIF data found in {filename}")
        logger.debug(
            f"Extracted {len(tags)} EXIF tag(s) from {filename}: "
            f"capture_time={metadata.capture_time} ({metadata.capture_tag})"
        )

        return metadata

    def _resolve_capture_time(self, tags: Dict[str, Any]):
        """
        Pick the first capture tag that parses.

        Returns:
            Tuple of (tag name, datetime), or (None, None)
        """
        for tag in CAPTURE_TAGS:
            raw = tags.get(tag)
            if not raw:
                continue
            try:
                return tag, datetime.strptime(str(raw).strip().rstrip("\x00"), EXIF_DATETIME_FORMAT)
            except ValueError:
                logger.warning(f"Failed to parse {tag}: {raw!r}")
        return None, None

    def _json_safe(self, value: Any) -> Any:
        """Convert Pillow tag values into JSON-serializable values."""
        if isinstance(value, bytes):
            try:
                return value.decode("ascii").rstrip("\x00")
            except UnicodeDecodeError:
                return f"<{len(value)} bytes>"
        if isinstance(value, str):
            return value.rstrip("\x00")
        if isinstance(value, (tuple, list)):
            return [self._json_safe(item) for item in value]
        if isinstance(value, dict):
            return {str(key): self._json_safe(item) for key, item in value.items()}
        if isinstance(value, (bool, int)) or value is None:
            return value
        if isinstance(value, (float, Fraction)) or hasattr(value, "numerator"):
            try:
                number = float(value)
            except (TypeError, ValueError, ZeroDivisionError):
                return str(value)
            # IFDRational with a zero denominator becomes nan
            return number if math.isfinite(number) else None
        return str(value)
