"""PDF text extraction plugin for Semantic Kernel."""

import importlib.util
import io
import logging
from typing import Any, Dict, List

from semantic_kernel.functions import kernel_function

from ..models.claim import PdfExtraction, PdfPage
from ..utils.errors import DocumentExtractionError

logger = logging.getLogger(__name__)


class PDFExtractorPlugin:
    """
    Semantic Kernel plugin for extracting text from claim PDFs.

    Uses PyPDF2 as primary extractor with pdfplumber as fallback
    for better handling of complex layouts.
    """

    def __init__(self):
        """Initialize PDF extractor plugin."""
        self._validate_dependencies()
        logger.info("Initialized PDFExtractorPlugin")

    def _validate_dependencies(self):
        """Validate that required libraries are available."""
        self.has_pypdf2 = importlib.util.find_spec("PyPDF2") is not None
        if not self.has_pypdf2:
            logger.warning("PyPDF2 not available")

        self.has_pdfplumber = importlib.util.find_spec("pdfplumber") is not None
        if not self.has_pdfplumber:
            logger.warning("pdfplumber not available")

        if not self.has_pypdf2 and not self.has_pdfplumber:
            raise ImportError(
                "Neither PyPDF2 nor pdfplumber is available. "
                "Install at least one: pip install PyPDF2 pdfplumber"
            )

    @kernel_function(
        name="extract_claim_pdf",
        description="Extract page text and document metadata from a claim PDF."
    )
    def extract(self, pdf_bytes: bytes, filename: str = "document.pdf") -> PdfExtraction:
        """
        Extract text pages from a PDF.

        Args:
            pdf_bytes: Raw PDF bytes
            filename: Upload name, used in logs and errors

        Returns:
            PdfExtraction with the pages that produced text

        Raises:
            DocumentExtractionError: If no extractor can read the document
        """
        last_error: Exception = RuntimeError("No PDF extraction library available")

        # Try PyPDF2 first (faster)
        if self.has_pypdf2:
            try:
                pages, metadata = self._extract_with_pypdf2(pdf_bytes)
                if any(page.text.strip() for page in pages):
                    logger.info(
                        f"Extracted {len(pages)} page(s) using PyPDF2 from {filename}"
                    )
                    return PdfExtraction(pages=pages, metadata=metadata, extractor="PyPDF2")
                logger.warning("PyPDF2 returned empty text, trying pdfplumber")
            except Exception as e:
                last_error = e
                logger.warning(f"PyPDF2 extraction failed: {str(e)}, trying pdfplumber")

        # Fallback to pdfplumber (better for complex layouts)
        if self.has_pdfplumber:
            try:
                pages, metadata = self._extract_with_pdfplumber(pdf_bytes)
                logger.info(
                    f"Extracted {len(pages)} page(s) using pdfplumber from {filename}"
                )
                return PdfExtraction(pages=pages, metadata=metadata, extractor="pdfplumber")
            except Exception as e:
                last_error = e
                logger.error(f"pdfplumber extraction failed: {str(e)}")

        raise DocumentExtractionError.pdf_extraction_failed(filename, last_error) from last_error

    def _extract_with_pypdf2(self, pdf_bytes: bytes):
        """Extract pages and metadata using PyPDF2."""
        import PyPDF2

        reader = PyPDF2.PdfReader(io.BytesIO(pdf_bytes))
        pages: List[PdfPage] = []

        for page_num, page in enumerate(reader.pages, start=1):
            page_text = page.extract_text()
            if page_text:
                pages.append(PdfPage(number=page_num, text=page_text))

        metadata: Dict[str, Any] = {
            'page_count': len(reader.pages),
            'title': None,
            'author': None,
            'creation_date': None,
        }
        if reader.metadata:
            metadata['title'] = reader.metadata.get('/Title')
            metadata['author'] = reader.metadata.get('/Author')
            metadata['creation_date'] = reader.metadata.get('/CreationDate')

        return pages, metadata

    def _extract_with_pdfplumber(self, pdf_bytes: bytes):
        """Extract pages and metadata using pdfplumber."""
        import pdfplumber

        pages: List[PdfPage] = []

        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                page_text = page.extract_text()
                if page_text:
                    pages.append(PdfPage(number=page_num, text=page_text))

            info = pdf.metadata or {}
            metadata = {
                'page_count': len(pdf.pages),
                'title': info.get('Title'),
                'author': info.get('Author'),
                'creation_date': info.get('CreationDate'),
            }

        return pages, metadata
