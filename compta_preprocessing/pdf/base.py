from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Extract the plain text of every page.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            One stripped string per page, in page order (blank pages give "").

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """
