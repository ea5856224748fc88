"""
Auction Pipeline

One full cycle: download both documents, parse, reconcile, enrich and
render the map export.
"""
from pathlib import Path
from typing import List, Optional

from src.sheriffsale.enrichment.orchestrator import EnrichmentOrchestrator
from src.sheriffsale.export.kml_renderer import KmlRenderer
from src.sheriffsale.models.listing import Listing
from src.sheriffsale.models.tokens import TokenPage
from src.sheriffsale.parsers.bid_list_parser import BidListParser
from src.sheriffsale.scrapers.document_scraper import DocumentScraper
from src.sheriffsale.services.auction_reconciler import AuctionReconciler
from src.sheriffsale.utils.logger import cycle_context, get_logger

logger = get_logger(__name__)


class SheriffSalePipeline:
    """
    Orchestrates one auction cycle.

    Example:
        >>> pipeline = SheriffSalePipeline()
        >>> listings = pipeline.run()
    """

    def __init__(
        self,
        reconciler: Optional[AuctionReconciler] = None,
        scraper: Optional[DocumentScraper] = None,
        parser: Optional[BidListParser] = None,
        orchestrator: Optional[EnrichmentOrchestrator] = None,
        renderer: Optional[KmlRenderer] = None
    ):
        self.reconciler = reconciler or AuctionReconciler()
        self.scraper = scraper or DocumentScraper()
        self.parser = parser or BidListParser()
        self.orchestrator = orchestrator or EnrichmentOrchestrator(self.reconciler)
        self.renderer = renderer or KmlRenderer(self.reconciler)

    def run(self) -> List[Listing]:
        """
        Run a full cycle against the published documents.

        Returns:
            Stored listings of the resolved auction; empty if the cycle failed
        """
        try:
            bid_pages = self.scraper.fetch_bid_list()
            postponement_pages = self.scraper.fetch_postponements()
            return self.run_pages(bid_pages, postponement_pages)
        except Exception as e:
            logger.error("pipeline_failed", error=str(e), error_type=type(e).__name__)
            return []

    def run_pages(
        self,
        bid_pages: List[TokenPage],
        postponement_pages: List[TokenPage]
    ) -> List[Listing]:
        """
        Run a cycle on already extracted token pages.

        Args:
            bid_pages: Pages of the master bid list
            postponement_pages: Pages of the postponement list

        Returns:
            Stored listings of the parsed auction; empty when nothing was
            fetched or no auction could be resolved
        """
        if not bid_pages and not postponement_pages:
            logger.error("documents_unavailable")
            return []

        with cycle_context(stage="parse"):
            bid_result = self.parser.parse(bid_pages, is_pp=False)
            postponement_result = self.parser.parse(postponement_pages, is_pp=True)

        parsed_auction_id = bid_result.auction_id or postponement_result.auction_id
        with cycle_context(auction_id=parsed_auction_id, stage="reconcile"):
            reconciled = self.reconciler.reconcile(
                bid_result.listings + postponement_result.listings,
                parsed_auction_id
            )

        auction_id = reconciled.auction_id
        if not auction_id:
            logger.error("auction_id_unresolved")
            return []

        with cycle_context(auction_id=auction_id, stage="enrichment"):
            self.orchestrator.run(auction_id)
        with cycle_context(auction_id=auction_id, stage="export"):
            self.render_only(auction_id)

        listings = self.reconciler.listings_for_auction(auction_id)
        logger.info("pipeline_complete", auction_id=auction_id, listings=len(listings))
        return listings

    def render_only(self, auction_id: Optional[str] = None) -> Optional[Path]:
        """
        Recompute the consensus postponement date and re-render the export.

        Args:
            auction_id: Auction to render (current auction if None)

        Returns:
            Path of the export, or None when no auction is known
        """
        auction_id = auction_id or self.reconciler.get_current_auction_id()
        if not auction_id:
            logger.error("auction_id_unresolved")
            return None

        global_pp_date = self.reconciler.resolve_global_postponement_date(auction_id)
        return self.renderer.render(auction_id, global_pp_date)
