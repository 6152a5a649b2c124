"""
Claim verification workflow.

ClaimVerifier sequences the plugins for each boundary operation:
submitting a claim document, submitting verification photos, and
requesting an image match. Claim context is kept per claim session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models.claim import ClaimRecord, DocumentInput
from .models.verification import DateVerdict, ImageMetadata, MatchResult
from .plugins import (
    ClaimExtractorPlugin,
    ConsistencyCheckerPlugin,
    EXIFReaderPlugin,
    ImageMatcherPlugin,
    PDFExtractorPlugin,
)
from .sessions import ClaimSession, ClaimSessionStore, StoredUpload
from .utils.bedrock_client import BedrockClient
from .utils.config import Config
from .utils.errors import ClaimContextMissing, InvalidDate, MissingUpload

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPES = {"text/plain"}


@dataclass
class PhotoVerification:
    """Result of checking a verification photo against the session's claim."""
    verdict: DateVerdict
    metadata: ImageMetadata
    session: ClaimSession

    def to_dict(self):
        payload = self.verdict.to_dict()
        payload["captureTag"] = self.metadata.capture_tag
        payload["tags"] = self.metadata.tags
        return payload


class ClaimVerifier:
    """Orchestrates extraction, metadata checks and image matching per session."""

    def __init__(
        self,
        pdf_extractor: PDFExtractorPlugin,
        claim_extractor: ClaimExtractorPlugin,
        exif_reader: EXIFReaderPlugin,
        consistency_checker: ConsistencyCheckerPlugin,
        image_matcher: ImageMatcherPlugin,
        sessions: Optional[ClaimSessionStore] = None,
    ):
        self.pdf_extractor = pdf_extractor
        self.claim_extractor = claim_extractor
        self.exif_reader = exif_reader
        self.consistency_checker = consistency_checker
        self.image_matcher = image_matcher
        self.sessions = sessions or ClaimSessionStore()

    @classmethod
    def from_config(
        cls,
        config: Config,
        bedrock_client: Optional[BedrockClient] = None
    ) -> "ClaimVerifier":
        """Build the verifier and its plugins from configuration."""
        bedrock = bedrock_client or BedrockClient(config.bedrock)
        return cls(
            pdf_extractor=PDFExtractorPlugin(),
            claim_extractor=ClaimExtractorPlugin(bedrock),
            exif_reader=EXIFReaderPlugin(),
            consistency_checker=ConsistencyCheckerPlugin(),
            image_matcher=ImageMatcherPlugin(bedrock),
            sessions=ClaimSessionStore(
                max_sessions=config.sessions.max_sessions,
                ttl_seconds=config.sessions.ttl_seconds,
            ),
        )

    def submit_claim_document(
        self,
        session_id: Optional[str],
        upload: Optional[StoredUpload]
    ) -> Tuple[ClaimSession, ClaimRecord]:
        """
        Extract a claim from an uploaded PDF (or plain-text) document.

        The extracted record replaces any earlier claim in the session. A
        new session is opened when session_id is absent or unknown.

        Raises:
            MissingUpload: If no document was uploaded
            UnrecognizedDocumentType, DocumentExtractionError,
            ExtractionServiceError, MalformedModelResponse: From the plugins
        """
        if upload is None:
            raise MissingUpload.build("No file uploaded.", field="pdf")

        document = self._to_document_input(upload)
        record = self.claim_extractor.extract_claim(document)
        return self._store_claim(session_id, record), record

    def submit_claim_text(self, session_id: Optional[str], text: str) -> Tuple[ClaimSession, ClaimRecord]:
        """Extract a claim from document text that is already available."""
        record = self.claim_extractor.extract_claim(DocumentInput.plain_text(text))
        return self._store_claim(session_id, record), record

    def submit_verification_photos(
        self,
        session_id: Optional[str],
        uploads: Sequence[Optional[StoredUpload]]
    ) -> PhotoVerification:
        """
        Check the first uploaded photo's capture date against the session's claim.

        The photo is cached in the session for a later image match.

        Raises:
            MissingUpload: If no photo was uploaded
            MetadataReadError: If the photo cannot be decoded
            ClaimContextMissing: If the session holds no claim
            InvalidDate: If the photo or claim date is absent or unparseable
        """
        photos: List[StoredUpload] = [upload for upload in uploads if upload is not None]
        if not photos:
            raise MissingUpload.build("No files uploaded.", field="images")

        photo = photos[0]
        if len(photos) > 1:
            logger.info(f"Received {len(photos)} photos, checking {photo.filename}")

        metadata = self.exif_reader.extract_metadata(photo.data, photo.filename)
        session = self._require_session(session_id)
        session = self.sessions.update(session.session_id, image=photo)
        claim = self._require_claim(session)

        if metadata.capture_time is None:
            reason = "no readable capture date" if metadata.has_exif else "no EXIF metadata"
            raise InvalidDate.build(
                f"Photo '{photo.filename}' has {reason}",
                filename=photo.filename,
                has_exif=metadata.has_exif
            )
        if claim.claim_date is None:
            raise InvalidDate.build(
                f"Claim date {claim.claim_date_text!r} could not be parsed",
                claim_date=claim.claim_date_text
            )

        verdict = self.consistency_checker.check(metadata.capture_time, claim.claim_date)
        return PhotoVerification(verdict=verdict, metadata=metadata, session=session)

    def request_image_match(
        self,
        session_id: Optional[str],
        upload: Optional[StoredUpload] = None
    ) -> MatchResult:
        """
        Score a photo against the session's covered item.

        A fresh upload replaces the cached photo; without one the photo
        cached by the last verification or match request is used.

        Raises:
            MissingUpload: If there is neither an upload nor a cached photo
            ClaimContextMissing: If the session holds no claim or covered item
            ScoringServiceError, MalformedModelResponse: From the matcher
        """
        session = self.sessions.get(session_id)
        if upload is not None:
            if session is None:
                raise self._context_missing(session_id)
            session = self.sessions.update(session.session_id, image=upload)

        image = session.image if session else None
        if image is None:
            raise MissingUpload.build("No image uploaded or cached for this session.", field="image")

        claim = self._require_claim(session)
        if not claim.covered_item:
            raise ClaimContextMissing.build("The submitted claim has no covered item.")

        return self.image_matcher.score(
            image_bytes=image.data,
            covered_item=claim.covered_item,
            content_type=image.content_type,
            image_name=image.filename
        )

    def _to_document_input(self, upload: StoredUpload) -> DocumentInput:
        """Decide the document representation from the upload itself."""
        content_type = upload.content_type.split(";")[0].strip().lower()
        is_pdf = upload.data.startswith(b"%PDF")
        is_text = content_type in TEXT_CONTENT_TYPES or upload.filename.lower().endswith(".txt")

        if is_text and not is_pdf:
            return DocumentInput.raw_bytes(upload.data, upload.filename)

        extraction = self.pdf_extractor.extract(upload.data, upload.filename)
        return DocumentInput.structured(extraction, upload.filename)

    def _store_claim(self, session_id: Optional[str], record: ClaimRecord) -> ClaimSession:
        session = self.sessions.get_or_create(session_id)
        session = self.sessions.update(session.session_id, claim=record)
        logger.info(f"Stored {record.role.key} claim in session {session.session_id}")
        return session

    def _require_session(self, session_id: Optional[str]) -> ClaimSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise self._context_missing(session_id)
        return session

    def _require_claim(self, session: ClaimSession) -> ClaimRecord:
        if session.claim is None:
            raise self._context_missing(session.session_id)
        return session.claim

    @staticmethod
    def _context_missing(session_id: Optional[str]) -> ClaimContextMissing:
        return ClaimContextMissing.build(
            "No claim has been submitted for this session. Upload the claim PDF first.",
            session_id=session_id
        )
