"""
Judgment Notice Scraper

Scrapes the Pittsburgh Legal Journal sheriff sale notices for the judgment
amount of each docket.
"""
from typing import Dict, Optional

import requests
from bs4 import BeautifulSoup, NavigableString

from config.settings import settings
from src.sheriffsale.utils.formatting import parse_amount
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

# Case numbers shorter than this are split across a text node and the span
SHORT_CASE_NUMBER = 10


class JudgmentScraper:
    """
    Scraper for docket to judgment amount pairs.

    Example:
        >>> scraper = JudgmentScraper()
        >>> judgments = scraper.fetch_judgments()
        >>> judgments["MG-19-001234"]
        125000.0
    """

    def __init__(self, url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.url = url or settings.judgments_url
        self.session = session or requests.Session()

    def fetch_judgments(self) -> Dict[str, float]:
        """
        Fetch and parse the notice page.

        Returns:
            Docket number to judgment amount; empty when the page is unavailable
        """
        logger.info("fetching_judgments", url=self.url)

        try:
            response = self.session.get(self.url, timeout=settings.judgments_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(
                "api_request_failed",
                url=self.url,
                error=str(e),
                error_type=type(e).__name__
            )
            return {}

        judgments = self.parse_judgments(response.text)
        logger.info("judgments_fetched", count=len(judgments))
        return judgments

    def parse_judgments(self, html: str) -> Dict[str, float]:
        """
        Pair case number spans with appraised amount spans by position.

        Args:
            html: Notice page HTML

        Returns:
            Docket number to judgment amount
        """
        soup = BeautifulSoup(html, "html.parser")
        dockets = soup.select("span#notice_case_number")
        amounts = soup.select("#notice_appraised_amount")

        judgments: Dict[str, float] = {}
        for index, span in enumerate(dockets):
            if index >= len(amounts):
                logger.warning("judgment_amount_missing", index=index)
                break

            case_number = span.get_text().strip()
            if len(case_number) < SHORT_CASE_NUMBER:
                prefix = span.previous_sibling
                if isinstance(prefix, NavigableString):
                    case_number = prefix.strip() + case_number

            amount = parse_amount(amounts[index].get_text())
            if not case_number or amount is None:
                logger.debug("judgment_skipped", case_number=case_number, index=index)
                continue

            judgments[case_number] = amount

        return judgments
