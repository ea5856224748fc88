"""
Tests for the valuation pass
"""
from datetime import datetime
from unittest.mock import Mock

import pytest

from src.sheriffsale.enrichment.credentials import CredentialPool
from src.sheriffsale.enrichment.valuation import (
    INVALID_FIELDS,
    VALUATION_FIELDS,
    ValuationEnricher,
    apply_bundle,
    build_query,
)
from src.sheriffsale.models.listing import (
    Coordinates,
    EnrichmentState,
    EnrichmentStatus,
    Listing,
    ZillowData,
)
from src.sheriffsale.scrapers.valuation_client import ValuationBundle

NOW = datetime(2019, 3, 1, 10, 0)


@pytest.fixture
def bundle():
    return ValuationBundle(
        zestimate={
            "zpid": 11223344,
            "zestimate": 120000,
            "zillowUrl": "https://www.zillow.com/homedetails/11223344_zpid/",
            "rental": {"zestimate": 1100},
        },
        parcel={
            "apn": "0001-A-00100",
            "lotSizeSquareFeet": 4000,
            "address": {"full": "123 Main St"},
            "coordinates": [-79.99, 40.44],
            "building": [{"bedrooms": 3, "fullBaths": 1, "yearBuilt": 1925}],
        },
        transaction={
            "salesPrice": 60000,
            "recordingDate": "2010-05-01",
            "lenderName": ["FIRST BANK"],
            "totalTransferTax": 1200,
            "unpaidBalance": 0,
        },
    )


@pytest.fixture
def reconciler():
    reconciler = Mock()
    reconciler.clock = lambda: NOW
    reconciler.save_listing.side_effect = lambda listing, fields=None: listing
    return reconciler


@pytest.fixture
def client(bundle):
    client = Mock()
    client.probe.return_value = True
    client.lookup.return_value = bundle
    return client


def make_listing(auction_number="1", address="123 MAIN ST PITTSBURGH PA 15222", **overrides):
    return Listing(auction_number=auction_number, address=[address], **overrides)


def saved(reconciler):
    return {call.args[0].auction_number: call for call in reconciler.save_listing.call_args_list}


class TestBuildQuery:
    """Tests for build_query"""

    def test_splits_zip(self):
        query = build_query("123 MAIN ST PITTSBURGH PA 15222")

        assert query.address == "123 MAIN ST PITTSBURGH PA"
        assert query.city_state_zip == "15222"

    def test_removes_noise_and_fixes_typos(self):
        query = build_query("VACANT LAND 45 OAK AVENEUE & REAR PITTSBURGH PA 15228")

        assert query.address == "45 OAK Ave REAR PITTSBURGH PA"

    def test_no_zip(self):
        assert build_query("123 MAIN ST") is None
        assert build_query("") is None


class TestApplyBundle:
    """Tests for apply_bundle"""

    def test_maps_all_blocks(self, bundle):
        listing = apply_bundle(make_listing(zillow_invalid=True), bundle, NOW)
        data = listing.zillow_data

        assert data.zillow_estimate == 120000
        assert data.zillow_rental_estimate == 1100
        assert data.zillow_id == "11223344"
        assert data.zillow_address == "123 Main St"
        assert data.rooms == 3
        assert data.bath == 1
        assert data.year_built == 1925
        assert data.sqft == 4000
        assert data.tax_assessment == 1200
        assert data.last_sold_price == 60000
        assert data.last_sold_date == "2010-05-01"
        assert data.lender_name == "FIRST BANK"
        assert data.unpaid_balance is None
        assert data.last_zillow_update == NOW
        assert listing.zillow_invalid is False
        assert listing.coords.latitude == 40.44
        assert listing.coords.longitude == -79.99
        assert listing.enrichment["valuation"].status is EnrichmentStatus.VALID

    def test_coordinates_kept_without_parcel_coordinates(self):
        listing = make_listing(coords=Coordinates(latitude=40.1, longitude=-80.1))

        updated = apply_bundle(listing, ValuationBundle(zestimate={"zestimate": 5}), NOW)

        assert updated.coords.latitude == 40.1
        assert updated.zillow_estimate == 5


class TestValuationEnricher:
    """Tests for ValuationEnricher.enrich"""

    def test_enriches_listings(self, reconciler, client):
        enricher = ValuationEnricher(
            reconciler, client=client, pool=CredentialPool(["tok"]), max_workers=2
        )

        result = enricher.enrich([make_listing("1"), make_listing("2")])

        assert result.attempted == 2
        assert result.enriched == 2
        for call in reconciler.save_listing.call_args_list:
            assert call.args[1] == VALUATION_FIELDS
        client.lookup.assert_any_call("tok", build_query("123 MAIN ST PITTSBURGH PA 15222"))

    def test_fresh_listings_are_skipped(self, reconciler, client):
        fresh = make_listing(enrichment={
            "valuation": EnrichmentState(status=EnrichmentStatus.VALID, updated_at=NOW)
        })
        enricher = ValuationEnricher(reconciler, client=client, pool=CredentialPool(["tok"]))

        result = enricher.enrich([fresh])

        assert result.skipped == 1
        client.lookup.assert_not_called()
        reconciler.save_listing.assert_not_called()

    def test_empty_bundle_marks_invalid(self, reconciler, client):
        client.lookup.return_value = ValuationBundle()
        enricher = ValuationEnricher(reconciler, client=client, pool=CredentialPool(["tok"]))

        result = enricher.enrich([make_listing("1")])

        assert result.failed == 1
        stored, fields = reconciler.save_listing.call_args.args
        assert fields == INVALID_FIELDS
        assert stored.zillow_invalid is True
        assert stored.enrichment["valuation"].status is EnrichmentStatus.FAILED

    def test_empty_bundle_keeps_existing_valuation_valid(self, reconciler, client):
        client.lookup.return_value = ValuationBundle()
        listing = make_listing(zillow_data=ZillowData(zillow_id="998877"))
        enricher = ValuationEnricher(reconciler, client=client, pool=CredentialPool(["tok"]))

        enricher.enrich([listing])

        stored = reconciler.save_listing.call_args.args[0]
        assert stored.zillow_invalid is False
        assert stored.enrichment["valuation"].status is EnrichmentStatus.FAILED

    def test_lookup_error_marks_invalid(self, reconciler, client):
        client.lookup.side_effect = RuntimeError("timeout")
        enricher = ValuationEnricher(reconciler, client=client, pool=CredentialPool(["tok"]))

        result = enricher.enrich([make_listing("1")])

        assert result.failed == 1
        assert reconciler.save_listing.call_args.args[0].zillow_invalid is True

    def test_address_without_zip_is_invalid(self, reconciler, client):
        listing = make_listing(address="123 MAIN ST", zillow_data=ZillowData(zillow_id="1"))
        enricher = ValuationEnricher(reconciler, client=client, pool=CredentialPool(["tok"]))

        result = enricher.enrich([listing])

        assert result.failed == 1
        assert reconciler.save_listing.call_args.args[0].zillow_invalid is True
        client.probe.assert_not_called()

    def test_no_credential_leaves_listings_untouched(self, reconciler, client):
        client.probe.return_value = False
        enricher = ValuationEnricher(reconciler, client=client, pool=CredentialPool(["a", "b"]))

        result = enricher.enrich([make_listing("1"), make_listing("2")])

        assert result.skipped == 2
        assert result.attempted == 0
        reconciler.save_listing.assert_not_called()
        client.lookup.assert_not_called()
