"""Claim field extraction plugin using the Bedrock text model."""

import logging
import time
from typing import Any, Dict, Optional

from semantic_kernel.functions import kernel_function

from ..models.claim import (
    FIELD_DATE,
    FIELD_ITEMS,
    FIELD_NAME,
    FIELD_REASON,
    FIELD_STATUS,
    ClaimRecord,
    ClaimRole,
    ClaimStatus,
    DocumentInput,
)
from ..utils.bedrock_client import BedrockClient
from ..utils.dates import parse_claim_date
from ..utils.errors import (
    BedrockAPIError,
    ExtractionServiceError,
    InvalidDate,
    UnrecognizedDocumentType,
)
from ..utils.response_formatter import extract_fenced_json

logger = logging.getLogger(__name__)


def detect_role(text: str) -> ClaimRole:
    """
    Classify a claim document by the sentinel label it contains.

    Roles are checked in declaration order (claimant, dealer, service
    center) and the first match wins, so exactly one role is returned.

    Raises:
        UnrecognizedDocumentType: If no sentinel label is present
    """
    for role in ClaimRole:
        if role.sentinel in text:
            return role
    raise UnrecognizedDocumentType.build(
        "Document contains none of the known information sections",
        sentinels=[role.sentinel for role in ClaimRole]
    )


def build_extraction_prompt(role: ClaimRole, text: str) -> str:
    """Build the field extraction prompt for a submitter role."""
    field_lines = "\n".join(f"- {name}: {hint}" for name, hint in role.fields)
    keys = ", ".join(f'"{name}"' for name, _ in role.fields)

    return f"""Analyze the following text and extract the following information in JSON format:
{field_lines}

Return a single JSON object with exactly these keys: {keys}.
Use null for any value that is not present in the text.
Wrap the JSON object in a ```json fenced code block and return nothing else.

Here's the text to analyze:
{text}"""


class ClaimExtractorPlugin:
    """
    Extracts structured claim fields from claim document text.

    One code path serves claimant, dealer and service center documents;
    the role only changes the prompt and the detail field.
    """

    def __init__(self, bedrock_client: BedrockClient):
        """
        Initialize claim extractor plugin.

        Args:
            bedrock_client: Configured BedrockClient instance
        """
        self.bedrock = bedrock_client
        logger.info("Initialized ClaimExtractorPlugin")

    @kernel_function(
        name="extract_claim_fields",
        description=(
            "Extract claimant, dealer or service center claim fields "
            "(name, status, claim date, reason, covered item) from document text."
        )
    )
    def extract_claim(self, document: DocumentInput) -> ClaimRecord:
        """
        Extract a ClaimRecord from a claim document.

        Args:
            document: Tagged document content

        Returns:
            ClaimRecord built from the model's reply

        Raises:
            UnrecognizedDocumentType: If the text carries no sentinel label
            ExtractionServiceError: If the model call fails
            MalformedModelResponse: If the reply holds no JSON object
        """
        text = document.to_text()
        role = detect_role(text)
        logger.info(
            f"Extracting {role.key} claim fields from {document.name} "
            f"({document.kind.value}, {len(text)} characters)"
        )

        prompt = build_extraction_prompt(role, text)
        messages = [{"role": "user", "content": [{"text": prompt}]}]

        start_time = time.time()
        try:
            response = self.bedrock.converse(messages=messages, operation="extract_claim_fields")
        except BedrockAPIError as e:
            raise ExtractionServiceError.build(
                f"Claim field extraction failed for {document.name}: {e.context.message}",
                error=e,
                role=role.key
            ) from e
        logger.debug(f"Extraction call completed in {time.time() - start_time:.3f}s")

        response_text = response.get("text", "")
        logger.debug(f"Raw extraction reply: {response_text[:500]}")

        fields = extract_fenced_json(response_text)
        record = self._build_record(role, fields)

        logger.info(
            f"Extracted claim for {document.name}: role={role.key}, "
            f"status={record.status.value if record.status else None}, "
            f"claim_date={record.claim_date}, covered_item={record.covered_item!r}"
        )
        return record

    def _build_record(self, role: ClaimRole, fields: Dict[str, Any]) -> ClaimRecord:
        """Map the model's field mapping onto a ClaimRecord."""
        claim_date_text = _as_text(fields.get(FIELD_DATE))
        claim_date = None
        if claim_date_text:
            try:
                claim_date = parse_claim_date(claim_date_text)
            except InvalidDate:
                # Kept as text; the date check reports it when it runs
                logger.warning(f"Claim date {claim_date_text!r} could not be normalized")

        status = ClaimStatus.parse(fields.get(FIELD_STATUS))
        if status is None and fields.get(FIELD_STATUS) is not None:
            logger.warning(f"Unrecognized claim status: {fields.get(FIELD_STATUS)!r}")

        return ClaimRecord(
            role=role,
            party_name=_as_text(fields.get(FIELD_NAME)),
            detail=fields.get(role.detail_field),
            status=status,
            claim_date_text=claim_date_text,
            claim_date=claim_date,
            reason=_as_text(fields.get(FIELD_REASON)),
            covered_item=_covered_item(fields.get(FIELD_ITEMS)),
            fields=fields,
        )


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _covered_item(value: Any) -> Optional[str]:
    # Models sometimes answer with a list of components
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value if item]
        return ", ".join(items) or None
    return _as_text(value)
