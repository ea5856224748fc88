"""
Re-render the KML export of an auction without re-running the pipeline.

Usage:
    python scripts/render_map.py [--auction-id 032019] [--output kml/map.kml]
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to Python path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from src.sheriffsale.export.kml_renderer import KmlRenderer
from src.sheriffsale.pipelines.auction_pipeline import SheriffSalePipeline
from src.sheriffsale.services.auction_reconciler import AuctionReconciler
from src.sheriffsale.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render the sheriff sale map export.")
    parser.add_argument("--auction-id", help="Auction code (MMYYYY); defaults to the current auction.")
    parser.add_argument("--output", help="Export path; defaults to KML_EXPORT_PATH.")
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    reconciler = AuctionReconciler()
    pipeline = SheriffSalePipeline(
        reconciler=reconciler,
        renderer=KmlRenderer(reconciler, export_path=args.output)
    )

    path = pipeline.render_only(args.auction_id)
    if path is None:
        logger.error("render_map_failed", auction_id=args.auction_id)
        return 1

    logger.info("render_map_finished", path=str(path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
