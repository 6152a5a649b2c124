"""Tests for claim role detection and claim field extraction."""

from datetime import date

import pytest

from claimcheck.models.claim import ClaimRole, ClaimStatus, DocumentInput, PdfExtraction, PdfPage
from claimcheck.plugins.claim_extractor import ClaimExtractorPlugin, build_extraction_prompt, detect_role
from claimcheck.utils.errors import (
    ExtractionServiceError,
    MalformedModelResponse,
    UnrecognizedDocumentType,
)
from conftest import CLAIMANT_REPLY, bedrock_failure, fenced


@pytest.fixture
def extractor(fake_bedrock):
    return ClaimExtractorPlugin(fake_bedrock)


# ============================================================================
# Role detection
# ============================================================================

@pytest.mark.parametrize("text, role", [
    ("Claimant Information:\nName: John", ClaimRole.CLAIMANT),
    ("Dealer Information:\nSpringfield Auto", ClaimRole.DEALER),
    ("Service Center Information:\nQuickFix", ClaimRole.SERVICE_CENTER),
])
def test_detect_role(text, role):
    assert detect_role(text) is role


def test_claimant_label_takes_precedence():
    text = "Service Center Information:\nDealer Information:\nClaimant Information:"
    assert detect_role(text) is ClaimRole.CLAIMANT


def test_dealer_label_takes_precedence_over_service_center():
    assert detect_role("Service Center Information:\nDealer Information:") is ClaimRole.DEALER


def test_unlabelled_document_is_rejected():
    with pytest.raises(UnrecognizedDocumentType) as excinfo:
        detect_role("Invoice #123\nTotal due: $40")
    assert excinfo.value.status_code == 422


def test_prompt_lists_role_fields():
    prompt = build_extraction_prompt(ClaimRole.DEALER, "Dealer Information:\nSpringfield Auto")

    assert "The full name of the dealer" in prompt
    assert "- Location: The address of the dealership" in prompt
    assert '"Items Covered"' in prompt
    assert prompt.endswith("Dealer Information:\nSpringfield Auto")


# ============================================================================
# Extraction
# ============================================================================

def test_extracts_claimant_record(extractor, fake_bedrock):
    fake_bedrock.queue(CLAIMANT_REPLY)

    record = extractor.extract_claim(DocumentInput.plain_text("Claimant Information:\nName: John Smith"))

    assert record.role is ClaimRole.CLAIMANT
    assert record.party_name == "John Smith"
    assert record.detail == "2019 Honda Civic LX"
    assert record.status is ClaimStatus.APPROVED
    assert record.claim_date_text == "2024:05:10"
    assert record.claim_date == date(2024, 5, 10)
    assert record.covered_item == "Alternator"
    assert record.to_claim_info()["Claim Date"] == "2024:05:10"


def test_one_model_call_with_role_prompt(extractor, fake_bedrock):
    fake_bedrock.queue(CLAIMANT_REPLY)

    extractor.extract_claim(DocumentInput.plain_text("Claimant Information:\nDealer Information:"))

    assert len(fake_bedrock.calls) == 1
    assert fake_bedrock.calls[0]["operation"] == "extract_claim_fields"
    prompt = fake_bedrock.prompt()
    assert "The full name of the customer" in prompt
    assert "The full name of the dealer" not in prompt


def test_unrecognized_document_makes_no_model_call(extractor, fake_bedrock):
    with pytest.raises(UnrecognizedDocumentType):
        extractor.extract_claim(DocumentInput.plain_text("Receipt for oil change"))
    assert fake_bedrock.calls == []


@pytest.mark.parametrize("document", [
    DocumentInput.raw_bytes(b"Dealer Information:\nSpringfield Auto Mall", "claim.txt"),
    DocumentInput.structured(
        PdfExtraction(pages=[PdfPage(1, "Dealer Information:\nSpringfield Auto Mall")], extractor="PyPDF2"),
        "claim.pdf",
    ),
    DocumentInput.plain_text("Dealer Information:\nSpringfield Auto Mall"),
])
def test_every_document_kind_reaches_the_prompt(extractor, fake_bedrock, document):
    fake_bedrock.queue(fenced('{"Name": "Springfield Auto Mall", "Claim Date": "June 3, 2024"}'))

    record = extractor.extract_claim(document)

    assert record.role is ClaimRole.DEALER
    assert record.claim_date == date(2024, 6, 3)
    assert "Springfield Auto Mall" in fake_bedrock.prompt()


def test_structured_extraction_marks_pages():
    extraction = PdfExtraction(pages=[PdfPage(1, "first"), PdfPage(2, "second")])
    assert DocumentInput.structured(extraction).to_text() == (
        "\n--- Page 1 ---\nfirst\n--- Page 2 ---\nsecond"
    )


def test_service_failure_is_wrapped(extractor, fake_bedrock):
    fake_bedrock.queue(bedrock_failure("extract_claim_fields"))

    with pytest.raises(ExtractionServiceError) as excinfo:
        extractor.extract_claim(DocumentInput.plain_text("Claimant Information:"))
    assert excinfo.value.user_message == "Error processing PDF."


def test_prose_reply_is_malformed(extractor, fake_bedrock):
    fake_bedrock.queue("I am unable to extract the claim details.")

    with pytest.raises(MalformedModelResponse):
        extractor.extract_claim(DocumentInput.plain_text("Claimant Information:"))


def test_unparseable_claim_date_is_kept_as_text(extractor, fake_bedrock):
    fake_bedrock.queue(fenced('{"Claim Date": "sometime in spring", "Claim Status": "under review"}'))

    record = extractor.extract_claim(DocumentInput.plain_text("Claimant Information:"))

    assert record.claim_date is None
    assert record.claim_date_text == "sometime in spring"
    assert record.status is None


def test_covered_item_list_is_joined(extractor, fake_bedrock):
    fake_bedrock.queue(fenced('{"Items Covered": ["Water pump", "Gasket"], "Location": "Peoria, IL"}'))

    record = extractor.extract_claim(DocumentInput.plain_text("Service Center Information:"))

    assert record.covered_item == "Water pump, Gasket"
    assert record.detail == "Peoria, IL"
