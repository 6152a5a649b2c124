"""Photo recency check against the claim date."""

import logging
from datetime import date, datetime
from typing import Optional, Union

from semantic_kernel.functions import kernel_function

from ..models.verification import DateVerdict
from ..utils.dates import parse_claim_date, subtract_one_month
from ..utils.errors import InvalidDate

logger = logging.getLogger(__name__)


class ConsistencyCheckerPlugin:
    """
    Semantic Kernel plugin checking photo chronology against a claim.

    A photo is valid when it was captured no earlier than one month before
    the claim date. The window is anchored at the claim date, not today.
    """

    def __init__(self):
        """Initialize consistency checker plugin."""
        logger.info("Initialized ConsistencyCheckerPlugin")

    @kernel_function(
        name="check_capture_date",
        description=(
            "Check that a photo's capture date falls within the one-month "
            "window ending at the claim date."
        )
    )
    def check(
        self,
        capture_date: Optional[Union[str, date, datetime]],
        claim_date: Optional[Union[str, date, datetime]]
    ) -> DateVerdict:
        """
        Compare a capture date with a claim date.

        Args:
            capture_date: Photo capture date or timestamp
            claim_date: Claim date, as text in any supported format or a date

        Returns:
            DateVerdict; valid iff capture_date >= claim_date minus one month

        Raises:
            InvalidDate: If either date is missing or cannot be parsed
        """
        if capture_date is None:
            raise InvalidDate.build("Photo has no readable capture date")
        if claim_date is None:
            raise InvalidDate.build("Claim has no readable claim date")

        capture = parse_claim_date(capture_date)
        claim = parse_claim_date(claim_date)
        window_start = subtract_one_month(claim)

        verdict = DateVerdict(
            valid=capture >= window_start,
            capture_date=capture,
            claim_date=claim,
            window_start=window_start
        )

        logger.info(
            f"Capture date check: capture={capture.isoformat()}, "
            f"claim={claim.isoformat()}, window_start={window_start.isoformat()}, "
            f"valid={verdict.valid}"
        )
        return verdict
