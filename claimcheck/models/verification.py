"""Photo verification data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..utils.dates import format_display_date


VALID_DATE_MESSAGE = "Valid Date"
STALE_DATE_MESSAGE = "Date is not valid: photo predates the one-month window before the claim date"

AUTHORIZED = "Authorized"
REJECTED = "Rejected"
BELOW_THRESHOLD_REASON = "matching percentage below acceptable threshold"


@dataclass
class ImageMetadata:
    """
    Metadata decoded from an uploaded image.

    Attributes:
        tags: Tag name to JSON-safe value
        width: Image width in pixels
        height: Image height in pixels
        format: Image format reported by Pillow
        capture_time: Capture timestamp, if the image carries one
        capture_tag: Name of the tag the capture time was read from
    """
    tags: Dict[str, Any] = field(default_factory=dict)
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    capture_time: Optional[datetime] = None
    capture_tag: Optional[str] = None

    @property
    def has_exif(self) -> bool:
        return bool(self.tags)


@dataclass(frozen=True)
class DateVerdict:
    """Outcome of comparing a photo capture date with a claim date."""
    valid: bool
    capture_date: date
    claim_date: date
    window_start: date

    @property
    def message(self) -> str:
        return VALID_DATE_MESSAGE if self.valid else STALE_DATE_MESSAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "valid": self.valid,
            "captureDate": format_display_date(self.capture_date),
            "claimDate": format_display_date(self.claim_date),
            "windowStart": format_display_date(self.window_start),
        }


@dataclass(frozen=True)
class ClaimDecision:
    status: str
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {"status": self.status}
        if self.reason:
            payload["reason"] = self.reason
        return payload


@dataclass(frozen=True)
class MatchResult:
    """
    Vision model comparison of a photo with the claimed item.

    Attributes:
        object_name: Object the model identified in the photo
        analyzed_image: Model's description of the photo
        match_percentage: Similarity to the covered item, 0..100
        decision: Decision derived from the percentage
    """
    object_name: Optional[str]
    analyzed_image: Optional[str]
    match_percentage: int
    decision: ClaimDecision

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Object Name": self.object_name,
            "Analyzed Image": self.analyzed_image,
            "Matching percentage": self.match_percentage,
            "Claim Status": self.decision.to_dict(),
        }
