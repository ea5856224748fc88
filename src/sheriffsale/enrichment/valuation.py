"""
Valuation Enrichment

Layers zestimate, parcel and transaction data onto listings.

The primary address is cleaned into a query (noise removed, ZIP split off)
for the lookup only; the stored address is never rewritten here.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Any, Dict, List, Optional

from config.settings import settings
from src.sheriffsale.enrichment.base import EnrichmentPass, PassResult
from src.sheriffsale.enrichment.credentials import CredentialPool
from src.sheriffsale.enrichment.freshness import VALUATION, mark, needs_refresh, source_state
from src.sheriffsale.models.listing import Coordinates, EnrichmentStatus, Listing, ZillowData
from src.sheriffsale.parsers.patterns import extract_zip
from src.sheriffsale.scrapers.valuation_client import ValuationBundle, ValuationClient, ValuationQuery
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

ADDRESS_NOISE = ("undefined", "&", "VACANT LAND")
ADDRESS_FIXES = {"AVENEUE": "Ave"}

VALUATION_FIELDS = ("zillow_data", "zillow_invalid", "coords", "enrichment")
INVALID_FIELDS = ("zillow_invalid", "enrichment")


def build_query(address: str) -> Optional[ValuationQuery]:
    """
    Clean a raw address into a valuation query.

    Args:
        address: Primary address as stored

    Returns:
        ValuationQuery, or None when the address carries no ZIP code
    """
    cleaned = address or ""
    for noise in ADDRESS_NOISE:
        cleaned = cleaned.replace(noise, "")
    for wrong, right in ADDRESS_FIXES.items():
        cleaned = cleaned.replace(wrong, right)

    zipcode = extract_zip(cleaned)
    if not zipcode:
        return None

    street = " ".join(cleaned.replace(zipcode, "", 1).split())
    return ValuationQuery(address=street, city_state_zip=zipcode)


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def apply_bundle(listing: Listing, bundle: ValuationBundle, now: datetime) -> Listing:
    """
    Map the three response blocks onto the listing.

    Every valuation attribute is replaced; coordinates are only replaced
    when the parcel record carries them.
    """
    zestimate: Dict[str, Any] = bundle.zestimate or {}
    parcel: Dict[str, Any] = bundle.parcel or {}
    transaction: Dict[str, Any] = bundle.transaction or {}
    building: Dict[str, Any] = _first(parcel.get("building")) or {}
    rental: Dict[str, Any] = _first(zestimate.get("rental")) or {}

    zillow_data = ZillowData(
        zillow_estimate=zestimate.get("zestimate") or None,
        zillow_rental_estimate=rental.get("zestimate"),
        tax_assessment=transaction.get("totalTransferTax") or None,
        rooms=building.get("bedrooms"),
        bath=building.get("baths") or building.get("fullBaths") or building.get("halfBaths"),
        sqft=parcel.get("lotSizeSquareFeet") or None,
        year_built=building.get("yearBuilt"),
        zillow_id=zestimate.get("zpid") or parcel.get("zpid"),
        zillow_link=zestimate.get("zillowUrl") or None,
        zillow_address=(parcel.get("address") or {}).get("full"),
        last_sold_price=transaction.get("salesPrice") or None,
        last_sold_date=transaction.get("signatureDate") or transaction.get("recordingDate"),
        lender_name=_first(transaction.get("lenderName")),
        apn=parcel.get("apn") or None,
        unpaid_balance=transaction.get("unpaidBalance") or None,
        last_zillow_update=now,
    )

    update: Dict[str, Any] = {"zillow_data": zillow_data, "zillow_invalid": False}

    coordinates = parcel.get("coordinates")
    if isinstance(coordinates, (list, tuple)) and len(coordinates) >= 2:
        # GeoJSON order: longitude, latitude
        update["coords"] = Coordinates(longitude=coordinates[0], latitude=coordinates[1])

    return mark(listing.model_copy(update=update), VALUATION, EnrichmentStatus.VALID, now)


class ValuationEnricher(EnrichmentPass):
    """
    Valuation lookup pass.

    Example:
        >>> enricher = ValuationEnricher(reconciler)
        >>> result = enricher.enrich(reconciler.listings_for_auction("032019"))
    """

    source = VALUATION

    def __init__(
        self,
        reconciler,
        client: Optional[ValuationClient] = None,
        pool: Optional[CredentialPool] = None,
        max_workers: Optional[int] = None,
        clock=None
    ):
        super().__init__(reconciler, clock)
        self.client = client or ValuationClient()
        self.pool = pool or CredentialPool(settings.valuation_tokens)
        self.max_workers = max_workers or settings.valuation_max_workers

    def enrich(self, listings: List[Listing]) -> PassResult:
        now = self.clock()
        result = PassResult()
        candidates = []

        for listing in listings:
            if not needs_refresh(source_state(listing, VALUATION), now.date()):
                result.skipped += 1
                continue

            query = build_query(listing.primary_address)
            if query is None:
                logger.warning(
                    "valuation_address_unusable",
                    auction_number=listing.auction_number,
                    address=listing.primary_address
                )
                self._mark_invalid(listing, now, keep_existing=False)
                result.failed += 1
                continue

            candidates.append((listing, query))

        if not candidates:
            logger.info("valuation_nothing_to_do", skipped=result.skipped, failed=result.failed)
            return result

        token = self.pool.acquire(self.client.probe, [query for _, query in candidates])
        if token is None:
            # No credential this cycle: listings stay eligible for the next run
            result.skipped += len(candidates)
            return result

        result.attempted = len(candidates)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_listing = {
                executor.submit(self.client.lookup, token, query): listing
                for listing, query in candidates
            }

            for future in as_completed(future_to_listing):
                listing = future_to_listing[future]
                try:
                    bundle = future.result()
                    if bundle.is_empty():
                        logger.warning("valuation_empty", auction_number=listing.auction_number)
                        self._mark_invalid(listing, now)
                        result.failed += 1
                        continue

                    updated = apply_bundle(listing, bundle, now)
                    if self.reconciler.save_listing(updated, VALUATION_FIELDS) is None:
                        result.failed += 1
                    else:
                        result.enriched += 1
                except Exception as e:
                    logger.error(
                        "valuation_lookup_failed",
                        auction_number=listing.auction_number,
                        error=str(e),
                        error_type=type(e).__name__
                    )
                    self._mark_invalid(listing, now)
                    result.failed += 1

        logger.info(
            "valuation_pass_complete",
            attempted=result.attempted,
            enriched=result.enriched,
            failed=result.failed,
            skipped=result.skipped
        )
        return result

    def _mark_invalid(self, listing: Listing, now: datetime, keep_existing: bool = True):
        """
        Record a failed lookup.

        With keep_existing, a listing that already has a valuation id keeps
        its valid flag.
        """
        has_id = bool(listing.zillow_data and listing.zillow_data.zillow_id)
        update = {} if keep_existing and has_id else {"zillow_invalid": True}
        failed = mark(listing.model_copy(update=update), VALUATION, EnrichmentStatus.FAILED, now)
        self.reconciler.save_listing(failed, INVALID_FIELDS)
