"""Data models for claim documents and photo verification."""

from .claim import (
    ClaimRecord,
    ClaimRole,
    ClaimStatus,
    DocumentInput,
    DocumentKind,
    PdfExtraction,
    PdfPage,
)
from .verification import ClaimDecision, DateVerdict, ImageMetadata, MatchResult

__all__ = [
    'ClaimRecord',
    'ClaimRole',
    'ClaimStatus',
    'DocumentInput',
    'DocumentKind',
    'PdfExtraction',
    'PdfPage',
    'ClaimDecision',
    'DateVerdict',
    'ImageMetadata',
    'MatchResult',
]
