"""
Auction Reconciler

Merges parsed listings into the store, tracks the current auction cycle and
computes the consensus postponement date of an auction.

Every write opens its own short session; a failed write is logged and the
rest of the batch continues.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from src.sheriffsale.db.repository import (
    CURRENT_AUCTION_ID_KEY,
    GLOBAL_PP_DATE_KEY,
    ConfigRepository,
    ListingRepository,
)
from src.sheriffsale.db.session import SessionFactory, SessionLocal, session_scope
from src.sheriffsale.models.listing import CORE_FIELDS, Listing
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


@dataclass
class ReconcileResult:
    """
    Outcome of merging one batch.

    Attributes:
        auction_id: Auction code of the batch
        listings: Listings as stored after the merge
        failed: Listings whose write failed
    """
    auction_id: Optional[str] = None
    listings: List[Listing] = field(default_factory=list)
    failed: int = 0

    @property
    def count(self) -> int:
        return len(self.listings)


def find_mode(values: Sequence[str]) -> Optional[str]:
    """
    Most frequent value; on a tie the value that reached the count first wins.

    Args:
        values: Values in encounter order

    Returns:
        The mode, or None for an empty sequence
    """
    if not values:
        return None

    counts: Counter = Counter()
    mode, mode_count = values[0], 1
    for value in values:
        counts[value] += 1
        if counts[value] > mode_count:
            mode, mode_count = value, counts[value]
    return mode


class AuctionReconciler:
    """
    Single write path for listings and auction state.

    Example:
        >>> reconciler = AuctionReconciler()
        >>> result = reconciler.reconcile(parse_result.listings, parse_result.auction_id)
        >>> pp_date = reconciler.resolve_global_postponement_date(result.auction_id)
    """

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        clock: Optional[Clock] = None
    ):
        self.session_factory = session_factory or SessionLocal
        self.clock = clock or datetime.now
        self.listing_repository = ListingRepository()
        self.config_repository = ConfigRepository()

    find_mode = staticmethod(find_mode)

    def reconcile(
        self,
        listings: Iterable[Listing],
        auction_id: Optional[str] = None
    ) -> ReconcileResult:
        """
        Upsert a batch of parsed listings by auction number.

        Only parser-owned fields are written, so enrichment collected in
        earlier cycles survives a re-parse. Each listing also records its
        position in the batch, which orders the postponement dates.

        Args:
            listings: Listings from the normalizer
            auction_id: Auction code resolved by the parser, if known

        Returns:
            ReconcileResult with the stored listings
        """
        listings = list(listings)
        batch_auction_id = auction_id or next(
            (listing.auction_id for listing in listings if listing.auction_id), None
        )
        result = ReconcileResult(auction_id=batch_auction_id)

        for position, listing in enumerate(listings):
            positioned = listing.model_copy(update={"document_position": position})
            stored = self.save_listing(positioned, CORE_FIELDS)
            if stored is None:
                result.failed += 1
            else:
                result.listings.append(stored)

        if batch_auction_id:
            self._set_current_auction_id(batch_auction_id)

        logger.info(
            "listings_reconciled",
            auction_id=batch_auction_id,
            count=result.count,
            failed=result.failed
        )
        return result

    def save_listing(
        self,
        listing: Listing,
        fields: Optional[Iterable[str]] = None
    ) -> Optional[Listing]:
        """
        Upsert one listing.

        Args:
            listing: Listing to store
            fields: Listing fields to write (all persisted fields if None)

        Returns:
            Listing as stored, or None if the write failed
        """
        try:
            with session_scope(self.session_factory) as session:
                record = self.listing_repository.upsert_listing(session, listing, fields)
                return record.to_listing()
        except SQLAlchemyError as e:
            logger.error(
                "listing_write_failed",
                auction_number=listing.auction_number,
                error=str(e)
            )
            return None

    def get_current_auction_id(self) -> Optional[str]:
        with session_scope(self.session_factory) as session:
            return self.config_repository.get_value(session, CURRENT_AUCTION_ID_KEY)

    def listings_for_auction(self, auction_id: str) -> List[Listing]:
        with session_scope(self.session_factory) as session:
            records = self.listing_repository.find_by_auction_id(session, auction_id)
            return [record.to_listing() for record in records]

    def mappable_listings(self, auction_id: str) -> List[Listing]:
        """Listings of an auction with a usable coordinate pair."""
        with session_scope(self.session_factory) as session:
            records = self.listing_repository.find_mappable(session, auction_id)
            return [record.to_listing() for record in records]

    def resolve_global_postponement_date(self, auction_id: str) -> datetime:
        """
        Consensus postponement date of an auction.

        The mode of the postponement dates of the postponed listings is
        stored under the globalPPDate config key. The clock's current time
        is returned when the config row is missing, no dates exist, or the
        store fails.

        Args:
            auction_id: Auction code

        Returns:
            Consensus postponement date
        """
        try:
            with session_scope(self.session_factory) as session:
                if self.config_repository.get_by_key(session, GLOBAL_PP_DATE_KEY) is None:
                    logger.warning("global_pp_date_config_missing", auction_id=auction_id)
                    return self.clock()

                dates = self.listing_repository.find_postponement_dates(session, auction_id)
                mode = find_mode([value.isoformat() for value in dates])
                if mode is None:
                    logger.warning("global_pp_date_unavailable", auction_id=auction_id)
                    return self.clock()

                self.config_repository.set_value(session, GLOBAL_PP_DATE_KEY, mode)
                logger.info(
                    "global_pp_date_resolved",
                    auction_id=auction_id,
                    global_pp_date=mode,
                    postponed=len(dates)
                )
                return datetime.fromisoformat(mode)
        except SQLAlchemyError as e:
            logger.error("global_pp_date_failed", auction_id=auction_id, error=str(e))
            return self.clock()

    def seed_config(self):
        """Create the config rows the pipeline expects, keeping existing values."""
        with session_scope(self.session_factory) as session:
            if self.config_repository.get_by_key(session, GLOBAL_PP_DATE_KEY) is None:
                self.config_repository.set_value(session, GLOBAL_PP_DATE_KEY, None)

    def _set_current_auction_id(self, auction_id: str):
        try:
            with session_scope(self.session_factory) as session:
                current = self.config_repository.get_value(session, CURRENT_AUCTION_ID_KEY)
                if current != auction_id:
                    self.config_repository.set_value(session, CURRENT_AUCTION_ID_KEY, auction_id)
                    logger.info(
                        "current_auction_id_changed",
                        previous=current,
                        auction_id=auction_id
                    )
        except SQLAlchemyError as e:
            logger.error("current_auction_id_write_failed", auction_id=auction_id, error=str(e))
