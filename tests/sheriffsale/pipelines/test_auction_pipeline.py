"""
Tests for SheriffSalePipeline
"""
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock

import pytest

from src.sheriffsale.enrichment.orchestrator import EnrichmentOrchestrator
from src.sheriffsale.export.kml_renderer import KmlRenderer
from src.sheriffsale.models.listing import Coordinates, Listing
from src.sheriffsale.models.tokens import TextToken, TokenPage
from src.sheriffsale.parsers.bid_list_parser import BidListParser, LayoutParameters, ParseResult
from src.sheriffsale.pipelines.auction_pipeline import SheriffSalePipeline
from src.sheriffsale.services.auction_reconciler import AuctionReconciler

NOW = datetime(2019, 3, 1, 9, 0)


def tok(text, x, y=5.0):
    return TextToken(text=text, x=x, y=y)


def compact_page(header, docket, auction_number, pp_date=""):
    return TokenPage(tokens=[
        tok(header, 20.0, 1.0),
        tok(docket, 2.0), tok("ATTORNEY", 5.0), tok("PLAINTIFF", 10.0),
        tok("MORTGAGE", 15.0), tok("03/04/2019", 20.0), tok("1.00", 24.0),
        tok("2.00", 28.0), tok("ACTIVE", 32.0), tok(pp_date, 36.0), tok("REASON", 45.0),
        tok(auction_number, 2.5, 6.0), tok("DEFENDANT", 8.0, 6.0),
        tok("Municipality: PITTSBURGH", 20.5, 6.0),
        tok(f"{auction_number} MAIN ST PITTSBURGH PA 15222", 30.0, 6.0),
    ])


class PlacingPass:
    """Stand-in enrichment pass that gives every listing coordinates."""

    source = "placing"

    def __init__(self, reconciler):
        self.reconciler = reconciler

    def enrich(self, listings):
        for listing in listings:
            placed = listing.model_copy(
                update={"coords": Coordinates(latitude=40.44, longitude=-79.99)}
            )
            self.reconciler.save_listing(placed, ("coords",))


@pytest.fixture
def reconciler(session_factory):
    reconciler = AuctionReconciler(session_factory=session_factory, clock=lambda: NOW)
    reconciler.seed_config()
    return reconciler


@pytest.fixture
def pipeline(reconciler, tmp_path):
    return SheriffSalePipeline(
        reconciler=reconciler,
        scraper=Mock(),
        parser=BidListParser(LayoutParameters()),
        orchestrator=EnrichmentOrchestrator(reconciler, passes=[PlacingPass(reconciler)]),
        renderer=KmlRenderer(reconciler, export_path=str(tmp_path / "map.kml"), threshold=85000.0),
    )


class TestSheriffSalePipeline:
    """Tests for the full cycle"""

    def test_run_pages_end_to_end(self, pipeline, tmp_path):
        bid_pages = [compact_page("Master Bid List Sale Date: March 4, 2019", "MG-18-000001", "1001")]
        pp_pages = [compact_page(
            "Postponement List Sale Date: March 4, 2019", "MG-18-000002", "1002", "04/01/2019"
        )]

        listings = pipeline.run_pages(bid_pages, pp_pages)

        assert [listing.auction_number for listing in listings] == ["1001", "1002"]
        assert listings[1].is_pp is True
        assert all(listing.has_coordinates() for listing in listings)
        assert pipeline.reconciler.get_current_auction_id() == "032019"

        document = (tmp_path / "map.kml").read_text(encoding="utf-8")
        assert document.count("<Placemark>") == 2
        assert "<name>March</name>" in document

    def test_run_uses_scraper(self, pipeline):
        pipeline.scraper.fetch_bid_list.return_value = [
            compact_page("Master Bid List Sale Date: March 4, 2019", "MG-18-000001", "1001")
        ]
        pipeline.scraper.fetch_postponements.return_value = []

        listings = pipeline.run()

        assert [listing.auction_number for listing in listings] == ["1001"]

    def test_run_swallows_cycle_errors(self, pipeline):
        pipeline.scraper.fetch_bid_list.side_effect = RuntimeError("site down")

        assert pipeline.run() == []

    def test_failed_fetch_ends_cycle_empty(self, reconciler):
        """A previous auction in the store is not re-enriched when nothing was fetched."""
        reconciler.reconcile([Listing(auction_number="1", auction_id="022019")], "022019")
        scraper = Mock()
        scraper.fetch_bid_list.return_value = []
        scraper.fetch_postponements.return_value = []
        orchestrator = Mock()
        renderer = Mock()
        pipeline = SheriffSalePipeline(
            reconciler=reconciler,
            scraper=scraper,
            parser=BidListParser(LayoutParameters()),
            orchestrator=orchestrator,
            renderer=renderer,
        )

        assert pipeline.run() == []
        orchestrator.run.assert_not_called()
        renderer.render.assert_not_called()
        assert reconciler.get_current_auction_id() == "022019"

    def test_unresolved_auction(self, reconciler):
        parser = Mock()
        parser.parse.return_value = ParseResult()
        orchestrator = Mock()
        pipeline = SheriffSalePipeline(
            reconciler=reconciler,
            scraper=Mock(),
            parser=parser,
            orchestrator=orchestrator,
            renderer=Mock(),
        )

        assert pipeline.run_pages([TokenPage(tokens=[])], []) == []
        orchestrator.run.assert_not_called()

    def test_render_only_uses_current_auction(self, reconciler):
        reconciler.reconcile([Listing(auction_number="1", auction_id="032019")], "032019")
        renderer = Mock()
        renderer.render.return_value = Path("kml/map.kml")
        pipeline = SheriffSalePipeline(
            reconciler=reconciler,
            scraper=Mock(),
            parser=Mock(),
            orchestrator=Mock(),
            renderer=renderer,
        )

        assert pipeline.render_only() == Path("kml/map.kml")
        renderer.render.assert_called_once_with("032019", NOW)

    def test_render_only_without_auction(self, reconciler):
        pipeline = SheriffSalePipeline(
            reconciler=reconciler,
            scraper=Mock(),
            parser=Mock(),
            orchestrator=Mock(),
            renderer=Mock(),
        )

        assert pipeline.render_only() is None
