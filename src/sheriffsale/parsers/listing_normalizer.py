"""
Listing Normalizer

Maps the positional slots of a raw fragment onto a typed Listing.

Two layouts exist. Bid list records carry the checkbox group and have at
least ``full_record_slots`` slots; postponement records are compact and
their trailing fields are indexed from the end of the fragment.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import ValidationError

from src.sheriffsale.models.listing import Listing, ListingChecks, SaleType
from src.sheriffsale.parsers.patterns import (
    BANK_REGEX,
    MUNICIPALITY_PREFIX,
    TAX_LIEN_REGEX,
    is_docket,
)
from src.sheriffsale.utils.formatting import parse_amount, parse_date_string
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

Slot = Union[str, List[str]]

# Full layout slot positions
DOCKET, ATTORNEY, PLAINTIFF, SALE_BASIS, SALE_DATE, COST_TAX, COST, SALE_STATUS, PP_DATE = range(9)
REASON_FOR_PP = 9
CHECK_SVS, CHECK_3129, CHECK_OK = 10, 11, 12
AUCTION_NUMBER = 13
DEFENDANT = 14
MUNICIPALITY = 15


@dataclass
class RawFragment:
    """
    Unstructured record produced by the token parser.

    Attributes:
        slots: Accumulated strings; the last slot is the address list
        free_and_clear: Free-and-clear marker seen in the address span
        page_number: Page on which the record ended
    """
    slots: List[Slot] = field(default_factory=list)
    free_and_clear: bool = False
    page_number: Optional[int] = None


def _slot(slots: List[Slot], index: int) -> Optional[Slot]:
    try:
        return slots[index]
    except IndexError:
        return None


def _text(value: Optional[Slot]) -> Optional[str]:
    """String slots only; address lists and missing slots yield None."""
    if isinstance(value, str):
        return value
    return None


class ListingNormalizer:
    """Converts raw fragments into Listing entities."""

    def __init__(self, full_record_slots: int = 17):
        self.full_record_slots = full_record_slots

    def normalize(
        self,
        fragment: RawFragment,
        is_pp: bool = False,
        auction_id: Optional[str] = None
    ) -> Optional[Listing]:
        """
        Normalize one fragment.

        Args:
            fragment: Raw fragment from the token parser
            is_pp: Fragment came from the postponement list
            auction_id: Auction code resolved from the document header

        Returns:
            Listing, or None when the fragment must be discarded
        """
        slots = fragment.slots
        docket_number = _text(_slot(slots, DOCKET))

        if not docket_number or not is_docket(docket_number):
            return self._discard("missing_docket_anchor", fragment)

        addresses = slots[-1] if isinstance(slots[-1], list) else None
        if not addresses:
            return self._discard("missing_address_anchor", fragment)

        if len(slots) >= self.full_record_slots:
            auction_number = _text(_slot(slots, AUCTION_NUMBER))
            defendant = _text(_slot(slots, DEFENDANT))
            municipality = _text(_slot(slots, MUNICIPALITY))
            reason_for_pp = _text(_slot(slots, REASON_FOR_PP))
            checks = ListingChecks(
                svs=_text(_slot(slots, CHECK_SVS)),
                n3129=_text(_slot(slots, CHECK_3129)),
                ok=_text(_slot(slots, CHECK_OK)),
            )
        else:
            # Compact layout: no checkbox group on postponement records
            auction_number = _text(_slot(slots, -4)) if len(slots) >= 4 else None
            defendant = _text(_slot(slots, -3)) if len(slots) >= 3 else None
            municipality = _text(_slot(slots, -2)) if len(slots) >= 2 else None
            reason_for_pp = _text(_slot(slots, REASON_FOR_PP)) if len(slots) > REASON_FOR_PP else ""
            checks = ListingChecks()

        if not auction_number or not auction_number.strip():
            return self._discard("missing_auction_number", fragment)

        plaintiff = _text(_slot(slots, PLAINTIFF)) or ""
        sale_basis = _text(_slot(slots, SALE_BASIS))

        try:
            listing = Listing(
                auction_number=auction_number,
                docket_number=docket_number,
                auction_id=auction_id,
                attorney_name=_text(_slot(slots, ATTORNEY)) or "",
                plaintiff_name=plaintiff,
                defendant_name=defendant or "",
                sale_type=(
                    SaleType.TAX_LIEN
                    if sale_basis and TAX_LIEN_REGEX.search(sale_basis)
                    else SaleType.MORTGAGE
                ),
                sale_date=parse_date_string(_text(_slot(slots, SALE_DATE))),
                sale_status=_text(_slot(slots, SALE_STATUS)),
                pp_date=parse_date_string(_text(_slot(slots, PP_DATE))),
                cost_tax=parse_amount(_text(_slot(slots, COST_TAX))),
                cost=parse_amount(_text(_slot(slots, COST))),
                reason_for_pp=reason_for_pp,
                checks=checks,
                municipality=(municipality or "").replace(MUNICIPALITY_PREFIX, "", 1),
                address=[address.replace(",", "") for address in addresses],
                is_pp=is_pp,
                is_duplicate=len(addresses) > 1,
                is_fc=fragment.free_and_clear,
                is_bank=bool(BANK_REGEX.search(plaintiff)),
            )
        except ValidationError as e:
            logger.warning(
                "listing_validation_failed",
                docket_number=docket_number,
                auction_number=auction_number,
                error=str(e)
            )
            return None

        return listing

    def _discard(self, reason: str, fragment: RawFragment) -> None:
        first = _slot(fragment.slots, DOCKET)
        logger.warning(
            "fragment_discarded",
            reason=reason,
            docket_number=first if isinstance(first, str) else None,
            slots=len(fragment.slots),
            page=fragment.page_number
        )
        return None
