"""Claim document and claim record data models."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class DocumentKind(Enum):
    """How the payload of a DocumentInput is represented."""
    RAW_BYTES = "raw_bytes"
    STRUCTURED_EXTRACTION = "structured_extraction"
    PLAIN_TEXT = "plain_text"


@dataclass
class PdfPage:
    """Text of a single PDF page."""
    number: int
    text: str


@dataclass
class PdfExtraction:
    """
    Output of the PDF text extractor.

    Attributes:
        pages: Pages that produced text, in document order
        metadata: Document metadata (page_count, title, author, creation_date)
        extractor: Library that produced the text ("PyPDF2" or "pdfplumber")
    """
    pages: List[PdfPage]
    metadata: Dict[str, Any] = field(default_factory=dict)
    extractor: str = ""

    def render_text(self) -> str:
        return "".join(f"\n--- Page {page.number} ---\n{page.text}" for page in self.pages)


@dataclass(frozen=True)
class DocumentInput:
    """
    Claim document content tagged with its representation.

    The producer decides the kind; consumers never sniff the payload.
    """
    kind: DocumentKind
    payload: Union[bytes, PdfExtraction, str]
    name: str = "document"

    @classmethod
    def raw_bytes(cls, data: bytes, name: str = "document") -> "DocumentInput":
        return cls(DocumentKind.RAW_BYTES, data, name)

    @classmethod
    def structured(cls, extraction: PdfExtraction, name: str = "document") -> "DocumentInput":
        return cls(DocumentKind.STRUCTURED_EXTRACTION, extraction, name)

    @classmethod
    def plain_text(cls, text: str, name: str = "document") -> "DocumentInput":
        return cls(DocumentKind.PLAIN_TEXT, text, name)

    def to_text(self) -> str:
        """Normalize the payload to text according to its kind."""
        if self.kind is DocumentKind.RAW_BYTES:
            return self.payload.decode("utf-8", errors="replace")
        if self.kind is DocumentKind.STRUCTURED_EXTRACTION:
            return self.payload.render_text()
        return self.payload


class ClaimRole(Enum):
    """
    Submitter role of a claim document.

    Each role carries the sentinel label that identifies it in document
    text, the party it describes, and its role-specific detail field.
    """
    CLAIMANT = ("claimant", "Claimant Information:", "The full name of the customer",
                "Vehicle Info", "Details about the vehicle involved")
    DEALER = ("dealer", "Dealer Information:", "The full name of the dealer",
              "Location", "The address of the dealership")
    SERVICE_CENTER = ("service_center", "Service Center Information:", "The name of the service center",
                      "Location", "The location of the service center")

    def __init__(self, key: str, sentinel: str, name_hint: str,
                 detail_field: str, detail_hint: str):
        self.key = key
        self.sentinel = sentinel
        self.name_hint = name_hint
        self.detail_field = detail_field
        self.detail_hint = detail_hint

    @property
    def fields(self) -> List[Tuple[str, str]]:
        """Field names and descriptions requested from the model for this role."""
        return [
            (FIELD_NAME, self.name_hint),
            (self.detail_field, self.detail_hint),
            (FIELD_STATUS, 'The current status of the claim, which should be one of '
                           '"Approved", "Rejected", or "Pending"'),
            (FIELD_DATE, "The date the claim was received"),
            (FIELD_REASON, "If the claim is rejected, provide the reason; "
                           "if approved, provide the reason for approval"),
            (FIELD_ITEMS, "The item covered in the claim (Component)"),
        ]


FIELD_NAME = "Name"
FIELD_STATUS = "Claim Status"
FIELD_DATE = "Claim Date"
FIELD_REASON = "Reason"
FIELD_ITEMS = "Items Covered"


class ClaimStatus(Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PENDING = "Pending"

    @classmethod
    def parse(cls, value: Any) -> Optional["ClaimStatus"]:
        """Case-insensitive lookup; unknown values yield None."""
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        for status in cls:
            if status.value.lower() == normalized:
                return status
        return None


@dataclass(frozen=True)
class ClaimRecord:
    """
    Structured claim fields extracted from a claim document.

    Attributes:
        role: Submitter role detected from the document
        party_name: Claimant, dealer or service center name
        detail: Vehicle info (claimant) or location (dealer, service center)
        status: Parsed claim status, None if the model returned something else
        claim_date_text: Claim date exactly as the model returned it
        claim_date: Normalized claim date, None if the text did not parse
        reason: Approval or rejection reason
        covered_item: Item covered by the claim
        fields: Raw field mapping returned by the model
    """
    role: ClaimRole
    party_name: Optional[str]
    detail: Any
    status: Optional[ClaimStatus]
    claim_date_text: Optional[str]
    claim_date: Optional[date]
    reason: Optional[str]
    covered_item: Optional[str]
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_claim_info(self) -> Dict[str, Any]:
        """Serialize back to the field names the model was asked for."""
        info = dict(self.fields)
        info.setdefault(FIELD_NAME, self.party_name)
        info.setdefault(self.role.detail_field, self.detail)
        info.setdefault(FIELD_STATUS, self.status.value if self.status else None)
        info.setdefault(FIELD_DATE, self.claim_date_text)
        info.setdefault(FIELD_REASON, self.reason)
        info.setdefault(FIELD_ITEMS, self.covered_item)
        return info
