"""
Enrichment Freshness

Per-source status bookkeeping. A source whose last outcome (success or
failure) was recorded today is not attempted again until the next day.
"""
from datetime import date, datetime

from src.sheriffsale.models.listing import EnrichmentState, EnrichmentStatus, Listing

VALUATION = "valuation"
GEOCODING = "geocoding"


def source_state(listing: Listing, source: str) -> EnrichmentState:
    """
    Last recorded state of a source.

    Valuation data stored before statuses were tracked is recognised by its
    last_zillow_update stamp.
    """
    state = listing.enrichment.get(source)
    if state is not None:
        return state

    if source == VALUATION and listing.zillow_data and listing.zillow_data.last_zillow_update:
        return EnrichmentState(
            status=EnrichmentStatus.VALID,
            updated_at=listing.zillow_data.last_zillow_update
        )
    return EnrichmentState()


def current_status(state: EnrichmentState, today: date) -> EnrichmentStatus:
    """A valid result from an earlier day is stale."""
    if state.status is EnrichmentStatus.VALID and (
        state.updated_at is None or state.updated_at.date() != today
    ):
        return EnrichmentStatus.STALE
    return state.status


def needs_refresh(state: EnrichmentState, today: date) -> bool:
    """
    Check whether a source should be attempted.

    Args:
        state: Last recorded state
        today: Current calendar day

    Returns:
        False only for an outcome (valid or failed) recorded today
    """
    if state.status in (EnrichmentStatus.VALID, EnrichmentStatus.FAILED):
        return state.updated_at is None or state.updated_at.date() != today
    return True


def mark(listing: Listing, source: str, status: EnrichmentStatus, now: datetime) -> Listing:
    """Copy of the listing with the source state replaced."""
    enrichment = dict(listing.enrichment)
    enrichment[source] = EnrichmentState(status=status, updated_at=now)
    return listing.model_copy(update={"enrichment": enrichment})
