"""
Bid List Parser

Turns the positional text tokens of a master bid list or postponement
list into Listing entities.

Records are anchored by a docket number token at the start and by an
address token at the end. Everything in between is accumulated
positionally and handed to the ListingNormalizer. The scan is an explicit
state machine:

    SEEKING       no record open; waiting for a docket token
    IN_RECORD     accumulating slots of the current record
    IN_CHECKLIST  reading the checkbox marks that follow a checkbox label
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from config.settings import settings
from src.sheriffsale.models.listing import Listing
from src.sheriffsale.models.tokens import TextToken, TokenPage
from src.sheriffsale.parsers.listing_normalizer import ListingNormalizer, RawFragment
from src.sheriffsale.parsers.patterns import (
    FREE_AND_CLEAR_REGEX,
    REPORT_HEADER_PHRASE,
    auction_id_from_header,
    is_address,
    is_docket,
)
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

CHECK_MARKS = ("Y", "X")


class LayoutCompatibilityError(ValueError):
    """Layout parameters are inconsistent with each other."""


@dataclass(frozen=True)
class LayoutParameters:
    """
    Document layout constants.

    Attributes:
        checkbox_x_min: Left edge of the checkbox label band
        checkbox_x_max: Right edge of the checkbox label band
        checkbox_columns: Number of checkbox marks following the label
        header_skip_offset: Tokens skipped at the top of a page after a report header
        ignored_y_positions: Vertical positions of page chrome tokens
        full_record_slots: Minimum slot count of a full bid list record
    """
    checkbox_x_min: float = 51.0
    checkbox_x_max: float = 52.0
    checkbox_columns: int = 3
    header_skip_offset: int = 15
    ignored_y_positions: tuple = (35.691, 1.5219999999999998)
    full_record_slots: int = 17

    def __post_init__(self):
        if self.checkbox_x_min > self.checkbox_x_max:
            raise LayoutCompatibilityError(
                f"checkbox band is empty: {self.checkbox_x_min} > {self.checkbox_x_max}"
            )
        if self.checkbox_columns < 1:
            raise LayoutCompatibilityError("checkbox_columns must be at least 1")
        if self.header_skip_offset < 0:
            raise LayoutCompatibilityError("header_skip_offset must not be negative")
        # docket + checkbox label + marks + address at the very least
        if self.full_record_slots < self.checkbox_columns + 3:
            raise LayoutCompatibilityError(
                f"full_record_slots={self.full_record_slots} cannot hold "
                f"{self.checkbox_columns} checkbox columns"
            )

    @classmethod
    def from_settings(cls) -> "LayoutParameters":
        return cls(
            checkbox_x_min=settings.layout_checkbox_x_min,
            checkbox_x_max=settings.layout_checkbox_x_max,
            checkbox_columns=settings.layout_checkbox_columns,
            header_skip_offset=settings.layout_header_skip_offset,
            ignored_y_positions=tuple(settings.layout_ignored_y_positions),
            full_record_slots=settings.layout_full_record_slots,
        )


class ParserState(str, Enum):
    SEEKING = "seeking"
    IN_RECORD = "in_record"
    IN_CHECKLIST = "in_checklist"


@dataclass
class ParseResult:
    """
    Output of one document parse.

    Attributes:
        auction_id: MMYYYY code from the first report header, if any
        listings: Normalized listings in document order
        anomalies: Tokens that raised while being scanned
        discarded: Fragments that did not normalize into a listing
    """
    auction_id: Optional[str] = None
    listings: List[Listing] = field(default_factory=list)
    anomalies: int = 0
    discarded: int = 0


class BidListParser:
    """
    Parses token pages into listings.

    Example:
        >>> parser = BidListParser()
        >>> result = parser.parse(pages, is_pp=False)
        >>> result.auction_id, len(result.listings)
    """

    def __init__(
        self,
        layout: Optional[LayoutParameters] = None,
        normalizer: Optional[ListingNormalizer] = None
    ):
        self.layout = layout or LayoutParameters.from_settings()
        self.normalizer = normalizer or ListingNormalizer(self.layout.full_record_slots)

    def parse(self, pages: Iterable[TokenPage], is_pp: bool = False) -> ParseResult:
        """
        Scan all pages of one document.

        Args:
            pages: Token pages in document order
            is_pp: Document is the postponement list

        Returns:
            ParseResult with the auction id and the listings found
        """
        result = ParseResult()
        state = ParserState.SEEKING
        slots: list = []
        marks: List[str] = []
        skip_header = False
        page_number = 0

        for page_number, page in enumerate(pages, start=1):
            tokens = page.tokens
            index = self.layout.header_skip_offset if skip_header else 0
            skip_header = False

            while index < len(tokens):
                token = tokens[index]
                index += 1

                try:
                    if self._is_ignored(token):
                        continue

                    text = token.text

                    if state is ParserState.IN_CHECKLIST:
                        if text in CHECK_MARKS and len(marks) < self.layout.checkbox_columns:
                            marks.append(text)
                            continue
                        slots.extend(self._close_checklist(marks))
                        marks = []
                        state = ParserState.IN_RECORD

                    if is_docket(text):
                        slots = []
                        state = ParserState.IN_RECORD

                    if result.auction_id is None:
                        auction_id = auction_id_from_header(text)
                        if auction_id:
                            result.auction_id = auction_id
                            logger.info("auction_id_resolved", auction_id=auction_id, is_pp=is_pp)

                    if REPORT_HEADER_PHRASE in text:
                        skip_header = True
                        break

                    if state is ParserState.SEEKING:
                        continue

                    if self._in_checkbox_band(token):
                        slots.append(text)
                        state = ParserState.IN_CHECKLIST
                    elif is_address(text):
                        addresses, free_and_clear = self._scan_address_span(tokens, index - 1)
                        slots.append(addresses)
                        fragment = RawFragment(
                            slots=slots,
                            free_and_clear=free_and_clear,
                            page_number=page_number
                        )
                        listing = self.normalizer.normalize(
                            fragment, is_pp=is_pp, auction_id=result.auction_id
                        )
                        if listing is None:
                            result.discarded += 1
                        else:
                            result.listings.append(listing)
                        slots = []
                        state = ParserState.SEEKING
                    elif self._continues_previous(tokens, index - 1, slots):
                        slots[-1] += text
                    else:
                        slots.append(text)

                except Exception as e:
                    result.anomalies += 1
                    logger.error(
                        "token_parse_failed",
                        page=page_number,
                        index=index - 1,
                        state=state.value,
                        slots=slots,
                        error=str(e)
                    )

            if state is ParserState.IN_CHECKLIST:
                slots.extend(self._close_checklist(marks))
                marks = []
                state = ParserState.IN_RECORD

        if slots:
            result.discarded += 1
            logger.warning("unterminated_fragment", page=page_number, slots=slots)

        if result.auction_id:
            result.listings = [
                listing if listing.auction_id else listing.model_copy(
                    update={"auction_id": result.auction_id}
                )
                for listing in result.listings
            ]

        logger.info(
            "document_parsed",
            is_pp=is_pp,
            auction_id=result.auction_id,
            pages=page_number,
            listings=len(result.listings),
            discarded=result.discarded,
            anomalies=result.anomalies
        )
        return result

    def _is_ignored(self, token: TextToken) -> bool:
        return any(
            math.isclose(token.y, y, abs_tol=1e-9) for y in self.layout.ignored_y_positions
        )

    def _in_checkbox_band(self, token: TextToken) -> bool:
        return self.layout.checkbox_x_min <= token.x <= self.layout.checkbox_x_max

    def _close_checklist(self, marks: List[str]) -> List[str]:
        """Pad the marks read so far to one entry per checkbox column."""
        return [
            "Y" if column < len(marks) and marks[column] == "Y" else "X"
            for column in range(self.layout.checkbox_columns)
        ]

    @staticmethod
    def _continues_previous(tokens: List[TextToken], index: int, slots: list) -> bool:
        """A token at the same x as its predecessor wraps onto the last slot."""
        if index == 0 or not slots or not isinstance(slots[-1], str):
            return False
        return tokens[index].x == tokens[index - 1].x

    def _scan_address_span(self, tokens: List[TextToken], start: int):
        """
        Collect addresses from the anchor up to the next docket token.

        Returns:
            (addresses, free_and_clear)
        """
        addresses: List[str] = []
        free_and_clear = False

        for token in tokens[start:]:
            if self._is_ignored(token):
                continue
            if addresses and is_docket(token.text):
                break
            if is_address(token.text):
                addresses.append(token.text)
            if FREE_AND_CLEAR_REGEX.search(token.text):
                free_and_clear = True

        return addresses, free_and_clear
