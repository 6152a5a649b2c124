"""Image match scoring plugin using the Bedrock vision model."""

import logging
import time
from typing import Any, Optional

from semantic_kernel.functions import kernel_function

from ..models.verification import (
    AUTHORIZED,
    BELOW_THRESHOLD_REASON,
    REJECTED,
    ClaimDecision,
    MatchResult,
)
from ..utils.bedrock_client import BedrockClient
from ..utils.errors import BedrockAPIError, MalformedModelResponse, ScoringServiceError
from ..utils.response_formatter import extract_fenced_json

logger = logging.getLogger(__name__)

# Fixed policy constant: a photo matching the claimed item at 80% or more
# authorizes the claim. Not configurable.
MATCH_THRESHOLD = 80

OBJECT_NAME_KEY = "Object Name"
ANALYZED_IMAGE_KEY = "Analyzed Image"
PERCENTAGE_KEY = "Matching percentage"

_MIME_FORMATS = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/pjpeg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


def decide(match_percentage: int) -> ClaimDecision:
    """Apply the match threshold (inclusive) to a percentage."""
    if match_percentage >= MATCH_THRESHOLD:
        return ClaimDecision(status=AUTHORIZED)
    return ClaimDecision(status=REJECTED, reason=BELOW_THRESHOLD_REASON)


def parse_percentage(value: Any) -> int:
    """
    Parse a match percentage such as 85, 85.0, "85" or "85%".

    Raises:
        MalformedModelResponse: If the value is not an integer in 0..100
    """
    if isinstance(value, bool) or value is None:
        percentage = None
    elif isinstance(value, int):
        percentage = value
    elif isinstance(value, float) and value.is_integer():
        percentage = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("%"):
            text = text[:-1].strip()
        try:
            percentage = int(text)
        except ValueError:
            percentage = None
    else:
        percentage = None

    if percentage is None:
        raise MalformedModelResponse.build(
            f"Matching percentage {value!r} is not an integer",
            value=str(value)
        )
    if not 0 <= percentage <= 100:
        raise MalformedModelResponse.build(
            f"Matching percentage {percentage} is outside 0..100",
            value=str(value)
        )
    return percentage


class ImageMatcherPlugin:
    """
    Semantic Kernel plugin comparing a claim photo with the covered item.

    The vision model names the object in the photo and estimates how well
    it matches the item label from the claim; the percentage is then held
    against MATCH_THRESHOLD.
    """

    def __init__(self, bedrock_client: BedrockClient):
        """
        Initialize image matcher plugin.

        Args:
            bedrock_client: Configured BedrockClient instance
        """
        self.bedrock = bedrock_client
        logger.info("Initialized ImageMatcherPlugin")

    @kernel_function(
        name="score_image_match",
        description=(
            "Identify the object in a claim photo and score how well it "
            "matches the item covered by the claim. Returns the match "
            "percentage and an Authorized/Rejected decision."
        )
    )
    def score(
        self,
        image_bytes: bytes,
        covered_item: str,
        content_type: Optional[str] = None,
        image_name: str = "image"
    ) -> MatchResult:
        """
        Score a photo against the covered item.

        Args:
            image_bytes: Raw image bytes (JPEG, PNG, GIF, WEBP)
            covered_item: Item label from the claim record
            content_type: Mime type reported by the upload, if any
            image_name: Name/identifier for the image

        Returns:
            MatchResult with the parsed percentage and decision

        Raises:
            ScoringServiceError: If the model call fails
            MalformedModelResponse: If the reply lacks a JSON object or a
                valid matching percentage
        """
        image_format = self._detect_image_format(image_bytes, content_type)
        logger.info(
            f"Scoring {image_name} ({image_format}, {len(image_bytes)} bytes) "
            f"against covered item {covered_item!r}"
        )

        # boto3's converse API expects raw bytes and handles the base64 encoding
        messages = [
            {
                "role": "user",
                "content": [
                    {
                        "image": {
                            "format": image_format,
                            "source": {"bytes": image_bytes}
                        }
                    },
                    {
                        "text": self._build_match_prompt(covered_item)
                    }
                ]
            }
        ]

        start_time = time.time()
        try:
            response = self.bedrock.converse(messages=messages, operation="score_image_match")
        except BedrockAPIError as e:
            raise ScoringServiceError.build(
                f"Image match scoring failed for {image_name}: {e.context.message}",
                error=e,
                image_name=image_name
            ) from e
        logger.debug(f"Scoring call completed in {time.time() - start_time:.3f}s")

        response_text = response.get("text", "")
        logger.debug(f"Raw scoring reply: {response_text[:500]}")

        payload = extract_fenced_json(response_text)
        if PERCENTAGE_KEY not in payload:
            raise MalformedModelResponse.build(
                f"Model reply has no '{PERCENTAGE_KEY}' field",
                keys=sorted(payload)
            )

        percentage = parse_percentage(payload[PERCENTAGE_KEY])
        result = MatchResult(
            object_name=payload.get(OBJECT_NAME_KEY),
            analyzed_image=payload.get(ANALYZED_IMAGE_KEY),
            match_percentage=percentage,
            decision=decide(percentage),
        )

        logger.info(
            f"Image match for {image_name}: object={result.object_name!r}, "
            f"percentage={percentage}, status={result.decision.status}"
        )
        return result

    def _detect_image_format(self, image_bytes: bytes, content_type: Optional[str]) -> str:
        """
        Detect image format from magic bytes, then the upload's mime type.

        Returns:
            Format string ("jpeg", "png", "gif", "webp")
        """
        if image_bytes.startswith(b'\xff\xd8\xff'):
            return "jpeg"
        elif image_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
            return "png"
        elif image_bytes.startswith(b'GIF87a') or image_bytes.startswith(b'GIF89a'):
            return "gif"
        elif image_bytes.startswith(b'RIFF') and b'WEBP' in image_bytes[:12]:
            return "webp"

        mime_format = _MIME_FORMATS.get((content_type or "").split(";")[0].strip().lower())
        if mime_format:
            return mime_format

        logger.warning("Unknown image format, defaulting to JPEG")
        return "jpeg"

    def _build_match_prompt(self, covered_item: str) -> str:
        """Build the identification and matching prompt."""
        return f"""Analyze this image and tell me what object it contains.

Then compare the identified object with the claimed item: "{covered_item}".
Estimate how closely the object in the image matches the claimed item as a
whole-number percentage from 0 to 100.

Return your answer as a JSON object in a ```json fenced code block with this structure:
```json
{{
    "{OBJECT_NAME_KEY}": "name of the object identified in the image",
    "{ANALYZED_IMAGE_KEY}": "short description of what the image shows",
    "{PERCENTAGE_KEY}": "85%"
}}
```

Return ONLY the fenced JSON block, no additional text."""
