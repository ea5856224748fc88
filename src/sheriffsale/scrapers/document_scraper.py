"""
Sheriff Sale Document Scraper

Downloads the master bid list and postponement list PDFs published by the
sheriff's office and turns them into token pages.
"""
from pathlib import Path
from typing import List, Optional

import requests

from config.settings import settings
from src.sheriffsale.models.tokens import TokenPage
from src.sheriffsale.parsers.token_loader import extract_pdf_tokens
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

BID_LIST_FILENAME = "bid_list.pdf"
POSTPONEMENTS_FILENAME = "postponements.pdf"


class DocumentScraper:
    """
    Fetches the source documents of an auction cycle.

    Example:
        >>> scraper = DocumentScraper()
        >>> pages = scraper.fetch_bid_list()
    """

    def __init__(
        self,
        documents_dir: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        self.documents_dir = Path(documents_dir or settings.documents_dir)
        self.session = session or requests.Session()

    def download(self, url: str, filename: str) -> Optional[Path]:
        """
        Download a document into the documents directory.

        Args:
            url: Document URL
            filename: Target file name

        Returns:
            Path of the stored file, or None if the download failed
        """
        logger.info("downloading_document", url=url, filename=filename)

        try:
            response = self.session.get(url, timeout=settings.document_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(
                "api_request_failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        self.documents_dir.mkdir(parents=True, exist_ok=True)
        path = self.documents_dir / filename
        path.write_bytes(response.content)

        logger.info("document_downloaded", path=str(path), size=len(response.content))
        return path

    def fetch_pages(self, url: str, filename: str) -> List[TokenPage]:
        """Download a document and extract its token pages; empty on failure."""
        path = self.download(url, filename)
        if path is None:
            return []
        return extract_pdf_tokens(path)

    def fetch_bid_list(self) -> List[TokenPage]:
        return self.fetch_pages(settings.bid_list_pdf_url, BID_LIST_FILENAME)

    def fetch_postponements(self) -> List[TokenPage]:
        return self.fetch_pages(settings.postponements_pdf_url, POSTPONEMENTS_FILENAME)
