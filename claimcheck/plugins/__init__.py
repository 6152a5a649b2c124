"""Semantic Kernel plugins for claim document processing and photo verification."""

from .pdf_extractor import PDFExtractorPlugin
from .exif_reader import EXIFReaderPlugin
from .claim_extractor import ClaimExtractorPlugin
from .image_matcher import ImageMatcherPlugin
from .consistency_checker import ConsistencyCheckerPlugin

__all__ = [
    'PDFExtractorPlugin',
    'EXIFReaderPlugin',
    'ClaimExtractorPlugin',
    'ImageMatcherPlugin',
    'ConsistencyCheckerPlugin'
]
