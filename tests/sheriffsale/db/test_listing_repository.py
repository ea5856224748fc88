"""
Tests for the repository layer
"""
from datetime import datetime

import pytest

from src.sheriffsale.db.models import ListingRecord
from src.sheriffsale.db.repository import (
    CURRENT_AUCTION_ID_KEY,
    ConfigRepository,
    ListingRepository,
)
from src.sheriffsale.models.listing import CORE_FIELDS, Coordinates, Listing, ZillowData


def make_listing(auction_number="1234", **overrides):
    data = dict(
        auction_number=auction_number,
        docket_number="MG-18-001234",
        auction_id="032019",
        plaintiff_name="WELLS FARGO BANK NA",
        address=["123 MAIN ST PITTSBURGH PA 15222"],
        checks={"svs": True, "3129": False, "ok": True},
    )
    data.update(overrides)
    return Listing(**data)


@pytest.fixture
def repository():
    return ListingRepository()


class TestListingRepository:
    """Tests for ListingRepository"""

    def test_upsert_inserts(self, test_db, repository):
        record = repository.upsert_listing(test_db, make_listing(), CORE_FIELDS)
        test_db.commit()

        assert record.auction_number == "1234"
        assert record.checks == {"svs": True, "3129": False, "ok": True}
        assert record.created_at is not None
        assert repository.count(test_db) == 1

    def test_upsert_updates_only_given_fields(self, test_db, repository):
        listing = make_listing(
            judgment=5000.0,
            coords=Coordinates(latitude=40.44, longitude=-79.99),
        )
        repository.upsert_listing(test_db, listing)
        test_db.commit()

        reparsed = make_listing(plaintiff_name="DITECH FINANCIAL LLC")
        record = repository.upsert_listing(test_db, reparsed, CORE_FIELDS)
        test_db.commit()

        assert record.plaintiff_name == "DITECH FINANCIAL LLC"
        assert record.judgment == 5000.0
        assert record.latitude == pytest.approx(40.44)
        assert repository.count(test_db) == 1

    def test_upsert_preserves_created_at(self, test_db, repository):
        first = repository.upsert_listing(test_db, make_listing(), CORE_FIELDS)
        test_db.commit()
        created_at = first.created_at

        second = repository.upsert_listing(test_db, make_listing(cost=10.0), CORE_FIELDS)
        test_db.commit()

        assert second.created_at == created_at

    def test_upsert_requires_key(self, test_db, repository):
        with pytest.raises(ValueError):
            repository.upsert(test_db, "", {"auction_id": "032019"})

    def test_find_all_and_find_one(self, test_db, repository):
        repository.upsert_listing(test_db, make_listing("1"), CORE_FIELDS)
        repository.upsert_listing(test_db, make_listing("2", auction_id="042019"), CORE_FIELDS)
        test_db.commit()

        assert len(repository.find_all(test_db)) == 2
        assert [r.auction_number for r in repository.find_all(test_db, auction_id="042019")] == ["2"]
        assert repository.find_one(test_db, auction_number="1").auction_id == "032019"
        assert repository.find_one(test_db, auction_number="missing") is None

    def test_remove(self, test_db, repository):
        repository.upsert_listing(test_db, make_listing(), CORE_FIELDS)
        test_db.commit()

        assert repository.remove(test_db, "1234") is True
        assert repository.remove(test_db, "1234") is False
        assert repository.count(test_db) == 0

    def test_find_mappable_excludes_zero_pair(self, test_db, repository):
        repository.upsert_listing(
            test_db, make_listing("1", coords=Coordinates(latitude=40.4, longitude=-79.9))
        )
        repository.upsert_listing(
            test_db, make_listing("2", coords=Coordinates(latitude=0, longitude=0))
        )
        repository.upsert_listing(test_db, make_listing("3"))
        test_db.commit()

        records = repository.find_mappable(test_db, "032019")

        assert [r.auction_number for r in records] == ["1"]

    def test_find_postponement_dates(self, test_db, repository):
        repository.upsert_listing(
            test_db, make_listing("1", is_pp=True, pp_date=datetime(2019, 4, 1))
        )
        repository.upsert_listing(
            test_db, make_listing("2", is_pp=False, pp_date=datetime(2019, 5, 1))
        )
        repository.upsert_listing(test_db, make_listing("3", is_pp=True))
        test_db.commit()

        assert repository.find_postponement_dates(test_db, "032019") == [datetime(2019, 4, 1)]

    def test_postponement_dates_in_document_order(self, test_db, repository):
        repository.upsert_listing(
            test_db,
            make_listing("9", is_pp=True, pp_date=datetime(2019, 4, 1), document_position=0),
        )
        repository.upsert_listing(
            test_db,
            make_listing("10", is_pp=True, pp_date=datetime(2019, 5, 6), document_position=1),
        )
        repository.upsert_listing(
            test_db, make_listing("11", is_pp=True, pp_date=datetime(2019, 6, 3))
        )
        test_db.commit()

        assert repository.find_postponement_dates(test_db, "032019") == [
            datetime(2019, 4, 1), datetime(2019, 5, 6), datetime(2019, 6, 3)
        ]


class TestListingRecord:
    """Tests for ListingRecord.to_listing"""

    def test_round_trip_of_enrichment_columns(self, test_db, repository):
        listing = make_listing(
            zillow_data=ZillowData(zillow_estimate=120000.0, zillow_id="123"),
            coords=Coordinates(latitude=40.4, longitude=-79.9),
            enrichment={"valuation": {"status": "valid", "updated_at": "2019-03-01T00:00:00"}},
        )
        repository.upsert_listing(test_db, listing)
        test_db.commit()

        stored = test_db.get(ListingRecord, "1234").to_listing()

        assert stored.zillow_estimate == 120000.0
        assert stored.zillow_data.zillow_id == "123"
        assert stored.checks.n3129 is False
        assert stored.enrichment["valuation"].updated_at == datetime(2019, 3, 1)
        assert stored.is_mappable()


class TestConfigRepository:
    """Tests for ConfigRepository"""

    def test_set_and_get(self, test_db):
        repository = ConfigRepository()

        assert repository.get_value(test_db, CURRENT_AUCTION_ID_KEY) is None

        repository.set_value(test_db, CURRENT_AUCTION_ID_KEY, "032019")
        repository.set_value(test_db, CURRENT_AUCTION_ID_KEY, "042019")
        test_db.commit()

        assert repository.get_value(test_db, CURRENT_AUCTION_ID_KEY) == "042019"
        assert repository.count(test_db) == 1
