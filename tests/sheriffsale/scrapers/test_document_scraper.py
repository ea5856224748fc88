"""
Unit tests for document_scraper module
"""
from unittest.mock import MagicMock, Mock, patch

import requests

from src.sheriffsale.models.tokens import TextToken, TokenPage
from src.sheriffsale.scrapers.document_scraper import DocumentScraper


class TestDocumentScraper:
    """Tests for DocumentScraper class"""

    def test_download_writes_file(self, tmp_path):
        """Test a downloaded document is stored under the documents directory"""
        response = Mock()
        response.content = b"%PDF-1.4 test"
        response.raise_for_status.return_value = None
        session = MagicMock()
        session.get.return_value = response
        scraper = DocumentScraper(documents_dir=str(tmp_path / "docs"), session=session)

        path = scraper.download("https://sheriff.example.test/bid.pdf", "bid_list.pdf")

        assert path == tmp_path / "docs" / "bid_list.pdf"
        assert path.read_bytes() == b"%PDF-1.4 test"

    def test_download_failure(self, tmp_path):
        """Test network errors yield no file"""
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("Network error")
        scraper = DocumentScraper(documents_dir=str(tmp_path), session=session)

        assert scraper.download("https://sheriff.example.test/bid.pdf", "bid_list.pdf") is None

    @patch('src.sheriffsale.scrapers.document_scraper.extract_pdf_tokens')
    def test_fetch_pages(self, mock_extract, tmp_path):
        """Test downloaded documents are tokenized"""
        pages = [TokenPage(tokens=[TextToken(text="MG-18-001234", x=2.0, y=5.0)])]
        mock_extract.return_value = pages
        scraper = DocumentScraper(documents_dir=str(tmp_path), session=MagicMock())

        with patch.object(scraper, "download", return_value=tmp_path / "bid_list.pdf"):
            assert scraper.fetch_pages("https://sheriff.example.test/bid.pdf", "bid_list.pdf") == pages

        mock_extract.assert_called_once_with(tmp_path / "bid_list.pdf")

    @patch('src.sheriffsale.scrapers.document_scraper.extract_pdf_tokens')
    def test_fetch_pages_after_failed_download(self, mock_extract, tmp_path):
        scraper = DocumentScraper(documents_dir=str(tmp_path), session=MagicMock())

        with patch.object(scraper, "download", return_value=None):
            assert scraper.fetch_pages("https://sheriff.example.test/bid.pdf", "bid_list.pdf") == []

        mock_extract.assert_not_called()
