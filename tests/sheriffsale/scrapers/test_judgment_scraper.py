"""
Unit tests for judgment_scraper module
"""
from unittest.mock import MagicMock, Mock

import requests

from src.sheriffsale.scrapers.judgment_scraper import JudgmentScraper

NOTICES_HTML = """
<html><body>
<div class="notice">
  <p>Case: <span id="notice_case_number">MG-19-001234</span></p>
  <p>Judgment: <span id="notice_appraised_amount">$125,000.00</span></p>
</div>
<div class="notice">
  <p>GD-<span id="notice_case_number">18-000777</span></p>
  <p><span id="notice_appraised_amount">2,345.67</span></p>
</div>
<div class="notice">
  <p><span id="notice_case_number">MG-19-009999</span></p>
  <p><span id="notice_appraised_amount">TBD</span></p>
</div>
</body></html>
"""


class TestJudgmentScraper:
    """Tests for JudgmentScraper class"""

    def test_parse_judgments(self):
        """Test case numbers are paired with amounts by position"""
        scraper = JudgmentScraper(url="https://notices.example.test", session=MagicMock())

        judgments = scraper.parse_judgments(NOTICES_HTML)

        assert judgments["MG-19-001234"] == 125000.0

    def test_short_case_number_takes_preceding_text(self):
        """Test a split case number is rejoined with its text prefix"""
        scraper = JudgmentScraper(url="https://notices.example.test", session=MagicMock())

        judgments = scraper.parse_judgments(NOTICES_HTML)

        assert judgments["GD-18-000777"] == 2345.67
        assert "18-000777" not in judgments

    def test_unparsable_amount_is_skipped(self):
        scraper = JudgmentScraper(url="https://notices.example.test", session=MagicMock())

        assert "MG-19-009999" not in scraper.parse_judgments(NOTICES_HTML)

    def test_fetch_judgments(self):
        """Test fetching the notice page"""
        response = Mock()
        response.text = NOTICES_HTML
        response.raise_for_status.return_value = None
        session = MagicMock()
        session.get.return_value = response
        scraper = JudgmentScraper(url="https://notices.example.test", session=session)

        judgments = scraper.fetch_judgments()

        assert len(judgments) == 2
        assert session.get.call_args.args[0] == "https://notices.example.test"

    def test_fetch_judgments_network_error(self):
        """Test network errors yield no judgments"""
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("Network error")
        scraper = JudgmentScraper(url="https://notices.example.test", session=session)

        assert scraper.fetch_judgments() == {}
