"""
Repository Pattern for Data Access

Four-operation store interface (find all, find one, upsert by key, remove by
key) plus the listing and config queries used by the pipeline.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import and_, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from src.sheriffsale.db.models import ConfigEntry, ListingRecord
from src.sheriffsale.models.listing import Listing
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

CURRENT_AUCTION_ID_KEY = "currentAuctionID"
GLOBAL_PP_DATE_KEY = "globalPPDate"


class BaseRepository:
    """
    Base repository with the store operations.

    Generic repository that can be extended for specific models.
    """

    def __init__(self, model: Type[T], key: str):
        """
        Initialize repository with model class.

        Args:
            model: SQLAlchemy model class
            key: Name of the primary key column used for upserts
        """
        self.model = model
        self.key = key

    def find_all(self, session: Session, **filters) -> List[T]:
        """
        Get all records matching the equality filters.

        Args:
            session: Database session
            **filters: Column name to value

        Returns:
            List of model instances
        """
        query = select(self.model).filter_by(**filters)
        result = session.execute(query).scalars().all()
        logger.debug(
            "repository_find_all",
            model=self.model.__name__,
            filters=filters,
            count=len(result)
        )
        return result

    def find_one(self, session: Session, **filters) -> Optional[T]:
        query = select(self.model).filter_by(**filters).limit(1)
        return session.execute(query).scalars().first()

    def get_by_key(self, session: Session, key_value: Any) -> Optional[T]:
        return session.get(self.model, key_value)

    def upsert(self, session: Session, key_value: Any, fields: Dict[str, Any]) -> T:
        """
        Insert or update a record by key.

        Only the given fields are written on conflict; created_at is kept.

        Args:
            session: Database session
            key_value: Primary key value
            fields: Column values to write

        Returns:
            Model instance as stored
        """
        if key_value is None or key_value == "":
            raise ValueError(f"{self.key} is required for upsert")

        values = dict(fields)
        values[self.key] = key_value

        insert = pg_insert if session.get_bind().dialect.name == "postgresql" else sqlite_insert
        stmt = insert(self.model).values(**values)
        update_columns = {
            name: stmt.excluded[name] for name in values if name != self.key
        }
        update_columns["updated_at"] = func.now()
        stmt = stmt.on_conflict_do_update(index_elements=[self.key], set_=update_columns)

        session.execute(stmt)
        session.flush()

        logger.debug("repository_upserted", model=self.model.__name__, key=key_value)
        return session.get(self.model, key_value, populate_existing=True)

    def remove(self, session: Session, key_value: Any) -> bool:
        """
        Delete record (hard delete).

        Returns:
            True if deleted, False if not found
        """
        instance = self.get_by_key(session, key_value)
        if not instance:
            logger.warning("repository_remove_not_found", model=self.model.__name__, key=key_value)
            return False

        session.delete(instance)
        session.flush()
        logger.info("repository_removed", model=self.model.__name__, key=key_value)
        return True

    def count(self, session: Session) -> int:
        return session.scalar(select(func.count()).select_from(self.model))


class ListingRepository(BaseRepository):
    """Repository for listings with pipeline-specific queries."""

    def __init__(self):
        super().__init__(ListingRecord, "auction_number")

    def upsert_listing(
        self,
        session: Session,
        listing: Listing,
        fields: Optional[Iterable[str]] = None
    ) -> ListingRecord:
        """
        Upsert a listing by auction number.

        Args:
            session: Database session
            listing: Listing to store
            fields: Listing fields to write (all persisted fields if None)

        Returns:
            Stored record
        """
        values = listing.to_record(fields)
        values.pop("auction_number", None)
        return self.upsert(session, listing.auction_number, values)

    def find_by_auction_id(self, session: Session, auction_id: str) -> List[ListingRecord]:
        query = (
            select(ListingRecord)
            .where(ListingRecord.auction_id == auction_id)
            .order_by(ListingRecord.auction_number)
        )
        return session.execute(query).scalars().all()

    def find_mappable(self, session: Session, auction_id: str) -> List[ListingRecord]:
        """
        Listings of an auction with usable coordinates.

        The degenerate 0,0 pair is excluded.
        """
        query = (
            select(ListingRecord)
            .where(
                and_(
                    ListingRecord.auction_id == auction_id,
                    ListingRecord.latitude.isnot(None),
                    ListingRecord.longitude.isnot(None),
                    ListingRecord.latitude != 0,
                    ListingRecord.longitude != 0,
                )
            )
            .order_by(ListingRecord.auction_number)
        )
        return session.execute(query).scalars().all()

    def find_postponement_dates(self, session: Session, auction_id: str) -> List[datetime]:
        """Postponement dates of the postponed listings of an auction, in document order."""
        query = (
            select(ListingRecord.pp_date)
            .where(
                and_(
                    ListingRecord.auction_id == auction_id,
                    ListingRecord.is_pp.is_(True),
                    ListingRecord.pp_date.isnot(None),
                )
            )
            .order_by(
                ListingRecord.document_position.is_(None),
                ListingRecord.document_position,
                ListingRecord.auction_number,
            )
        )
        return list(session.execute(query).scalars().all())


class ConfigRepository(BaseRepository):
    """Repository for key/value configuration entries."""

    def __init__(self):
        super().__init__(ConfigEntry, "key")

    def get_value(self, session: Session, key: str) -> Optional[str]:
        entry = self.get_by_key(session, key)
        return entry.value if entry else None

    def set_value(self, session: Session, key: str, value: Optional[str]) -> ConfigEntry:
        entry = self.upsert(session, key, {"value": value})
        logger.info("config_value_set", key=key, value=value)
        return entry
