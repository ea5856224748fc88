"""
Geocoding Fallback

Places listings the valuation pass could not locate. A geocoding result is
only trusted when its ZIP code appears in the listing's stored address.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import List, Optional

from config.settings import settings
from src.sheriffsale.enrichment.base import EnrichmentPass, PassResult
from src.sheriffsale.enrichment.freshness import GEOCODING, mark, needs_refresh, source_state
from src.sheriffsale.models.listing import Coordinates, EnrichmentStatus, Listing
from src.sheriffsale.scrapers.geocoding_client import GeocodeCandidate, GeocodingClient
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

GEOCODING_FIELDS = ("coords", "address", "enrichment")


def is_geocode_candidate(listing: Listing) -> bool:
    """Invalid valuation, no coordinates and a non-empty primary address."""
    return listing.zillow_invalid and not listing.has_coordinates() and bool(listing.primary_address)


def confirms(candidate: GeocodeCandidate, address: str) -> bool:
    """The candidate's ZIP code must be part of the stored address."""
    return bool(candidate.zipcode) and candidate.zipcode in address


def apply_candidate(listing: Listing, candidate: GeocodeCandidate, now: datetime) -> Listing:
    """Set the coordinates and replace the primary address with the formatted one."""
    address = list(listing.address)
    if candidate.formatted_address:
        address[0] = candidate.formatted_address

    updated = listing.model_copy(update={
        "coords": Coordinates(latitude=candidate.latitude, longitude=candidate.longitude),
        "address": address,
    })
    return mark(updated, GEOCODING, EnrichmentStatus.VALID, now)


class GeocodingEnricher(EnrichmentPass):
    source = GEOCODING

    def __init__(
        self,
        reconciler,
        client: Optional[GeocodingClient] = None,
        max_workers: Optional[int] = None,
        clock=None
    ):
        super().__init__(reconciler, clock)
        self.client = client or GeocodingClient()
        self.max_workers = max_workers or settings.geocoding_max_workers

    def enrich(self, listings: List[Listing]) -> PassResult:
        """
        Geocode every candidate listing concurrently.

        Listings without a confirmed result keep no coordinates. A listing
        whose geocoding outcome was already recorded today is skipped.
        """
        now = self.clock()
        result = PassResult()
        candidates = [
            listing for listing in listings
            if is_geocode_candidate(listing)
            and needs_refresh(source_state(listing, GEOCODING), now.date())
        ]
        result.skipped = len(listings) - len(candidates)
        result.attempted = len(candidates)

        if not candidates:
            return result

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_listing = {
                executor.submit(self.client.geocode, listing.primary_address): listing
                for listing in candidates
            }

            for future in as_completed(future_to_listing):
                listing = future_to_listing[future]
                try:
                    results = future.result()
                except Exception as e:
                    logger.error(
                        "geocoding_failed",
                        auction_number=listing.auction_number,
                        error=str(e),
                        error_type=type(e).__name__
                    )
                    result.failed += 1
                    continue

                if not results or not confirms(results[0], listing.primary_address):
                    logger.info(
                        "geocoding_unconfirmed",
                        auction_number=listing.auction_number,
                        address=listing.primary_address,
                        zipcode=results[0].zipcode if results else None
                    )
                    failed = mark(listing, GEOCODING, EnrichmentStatus.FAILED, now)
                    self.reconciler.save_listing(failed, ("enrichment",))
                    result.failed += 1
                    continue

                updated = apply_candidate(listing, results[0], now)
                if self.reconciler.save_listing(updated, GEOCODING_FIELDS) is None:
                    result.failed += 1
                else:
                    result.enriched += 1

        logger.info(
            "geocoding_pass_complete",
            attempted=result.attempted,
            enriched=result.enriched,
            failed=result.failed
        )
        return result
