"""
Tests for the KML export
"""
from datetime import datetime
from unittest.mock import Mock

import pytest

from src.sheriffsale.export.kml_renderer import (
    KML_CONTENT_TYPE,
    KmlRenderer,
    MarkerType,
    classify_marker,
    content_disposition,
    month_name,
)
from src.sheriffsale.models.listing import Coordinates, Listing, SaleType, ZillowData

GLOBAL_PP_DATE = datetime(2019, 4, 1)
THRESHOLD = 85000.0


def make_listing(auction_number="1234", estimate=None, **overrides):
    data = dict(
        auction_number=auction_number,
        docket_number="MG-18-001234",
        auction_id="032019",
        attorney_name="KML LAW GROUP",
        plaintiff_name="SMITH & SONS",
        address=["123 MAIN ST PITTSBURGH PA 15222"],
        coords=Coordinates(latitude=40.44, longitude=-79.99),
        checks={"svs": True, "3129": False, "ok": True},
    )
    if estimate is not None:
        data["zillow_data"] = ZillowData(zillow_estimate=estimate)
    data.update(overrides)
    return Listing(**data)


def classify(listing):
    return classify_marker(listing, GLOBAL_PP_DATE, THRESHOLD)


class TestClassifyMarker:
    """Tests for the marker rules"""

    def test_invalid_valuation_first(self):
        listing = make_listing(zillow_invalid=True, sale_status="STAYED", is_fc=True)
        assert classify(listing) is MarkerType.INVALID

    def test_stayed_regardless_of_flags(self):
        listing = make_listing(estimate=90000, sale_status="STAYED", is_fc=True, is_bank=True)
        assert classify(listing) is MarkerType.STAYED

    def test_postponed_past_consensus_is_stayed(self):
        listing = make_listing(is_pp=True, pp_date=datetime(2019, 5, 6), is_bank=True)
        assert classify(listing) is MarkerType.STAYED

    def test_postponed_to_consensus_is_not_stayed(self):
        listing = make_listing(is_pp=True, pp_date=GLOBAL_PP_DATE, is_bank=True)
        assert classify(listing) is MarkerType.BANK

    def test_free_and_clear_expensive(self):
        assert classify(make_listing(estimate=90000, is_fc=True)) is MarkerType.FREE_AND_CLEAR_EXPENSIVE

    def test_free_and_clear_cheap(self):
        assert classify(make_listing(estimate=50000, is_fc=True)) is MarkerType.FREE_AND_CLEAR

    def test_free_and_clear_beats_bank(self):
        assert classify(make_listing(is_fc=True, is_bank=True)) is MarkerType.FREE_AND_CLEAR

    def test_bank(self):
        assert classify(make_listing(estimate=100000, is_bank=True)) is MarkerType.BANK_EXPENSIVE

    def test_tax_lien(self):
        listing = make_listing(estimate=10000, sale_type=SaleType.TAX_LIEN)
        assert classify(listing) is MarkerType.TAX_LIEN

    def test_mortgage(self):
        assert classify(make_listing(estimate=85000.01)) is MarkerType.MORTGAGE_EXPENSIVE
        assert classify(make_listing(estimate=85000)) is MarkerType.MORTGAGE
        assert classify(make_listing()) is MarkerType.MORTGAGE

    def test_classification_error_falls_back_to_mortgage(self):
        listing = Mock()
        listing.zillow_invalid = False
        listing.sale_status = None
        listing.pp_date = datetime(2019, 5, 6)
        listing.auction_number = "1"

        assert classify_marker(listing, "not a date", THRESHOLD) is MarkerType.MORTGAGE


class TestHelpers:
    """Tests for export helpers"""

    def test_content_disposition(self):
        assert content_disposition("map.kml") == 'attachment; filename="map.kml"'
        assert KML_CONTENT_TYPE == "application/vnd.google-earth.kml+xml"

    def test_month_name(self):
        assert month_name("032019") == "March"
        assert month_name("") == ""

    def test_style_url(self):
        assert MarkerType.STAYED.style_url == "#stayPlacemark"


class TestKmlRenderer:
    """Tests for KmlRenderer"""

    @pytest.fixture
    def renderer(self, tmp_path):
        return KmlRenderer(Mock(), export_path=str(tmp_path / "kml" / "map.kml"), threshold=THRESHOLD)

    def test_document_structure(self, renderer):
        document = renderer.build_document("032019", [make_listing()], GLOBAL_PP_DATE)

        assert document.startswith('<kml xmlns="http://www.opengis.net/kml/2.2"><Document>')
        assert document.endswith("</Document></kml>")
        assert "<name>March</name><open>1</open>" in document
        assert "<description>March postponements</description>" in document
        assert document.count("<Style id=") == len(MarkerType)
        assert '<Style id="mortgagePlacemark"><IconStyle><Icon><href>' in document
        assert document.index("<LookAt>") < document.index("<Placemark>")

    def test_placemark_contents(self, renderer):
        placemark = renderer.build_placemark(make_listing(), GLOBAL_PP_DATE)

        assert placemark.startswith("<Placemark><name>123 MAIN ST PITTSBURGH PA 15222</name>")
        assert "<styleUrl>#mortgagePlacemark</styleUrl>" in placemark
        assert "<coordinates>-79.99,40.44,0</coordinates>" in placemark
        assert '<Data name="Checks"><value>Y X Y</value></Data>' in placemark
        assert '<Data name="Plaintiff Name"><value>SMITH and SONS</value></Data>' in placemark
        assert "&" not in placemark

    def test_placemark_name_prefers_valuation_address(self, renderer):
        listing = make_listing(zillow_data=ZillowData(zillow_address="123 Main St"))

        placemark = renderer.build_placemark(listing, GLOBAL_PP_DATE)

        assert "<name>123 Main St</name>" in placemark

    def test_extended_data_order(self):
        listing = make_listing(
            estimate=120000,
            firm_name="KML Law Group",
            is_pp=True,
            pp_date=datetime(2019, 4, 1),
        )

        names = [name for name, _ in KmlRenderer.extended_data(listing)]

        assert names[:3] == ["Auction Number", "Sale Type", "Judgment"]
        assert names.index("Attorney Name") < names.index("Firm Name") < names.index("Plaintiff Name")
        assert "Contact Email" not in names
        assert names[-1] == "PP Date"

    def test_angle_brackets_removed(self, renderer):
        listing = make_listing(attorney_name="<b>KML</b>")

        placemark = renderer.build_placemark(listing, GLOBAL_PP_DATE)

        assert "<b>" not in placemark
        assert '<Data name="Attorney Name"><value>bKML/b</value></Data>' in placemark

    def test_unmappable_listings_are_left_out(self, renderer):
        listings = [
            make_listing("1"),
            make_listing("2", coords=Coordinates(latitude=0, longitude=0)),
            make_listing("3", coords=None),
        ]

        document = renderer.build_document("032019", listings, GLOBAL_PP_DATE)

        assert document.count("<Placemark>") == 1

    def test_render_writes_export(self, renderer):
        renderer.reconciler.mappable_listings.return_value = [make_listing("1"), make_listing("2")]

        path = renderer.render("032019", GLOBAL_PP_DATE)

        content = path.read_text(encoding="utf-8")
        assert content.count("<Placemark>") == 2
        renderer.reconciler.mappable_listings.assert_called_once_with("032019")
