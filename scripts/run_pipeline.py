"""
Run one sheriff sale cycle: download the bid and postponement lists, parse,
reconcile, enrich and export the map.

Usage:
    python scripts/run_pipeline.py [--init-db]
    python scripts/run_pipeline.py --bid-list data/bid_list.json --postponements data/pp.json
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to Python path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from src.sheriffsale.db.session import create_all_tables, health_check
from src.sheriffsale.parsers.token_loader import extract_pdf_tokens, load_pdf2json
from src.sheriffsale.pipelines.auction_pipeline import SheriffSalePipeline
from src.sheriffsale.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Parse, enrich and map the current sheriff sale listings.")
    parser.add_argument("--bid-list", help="Local bid list (.pdf or pdf2json .json) instead of downloading it.")
    parser.add_argument("--postponements", help="Local postponement list (.pdf or pdf2json .json).")
    parser.add_argument("--init-db", action="store_true", help="Create tables and seed config rows before running.")
    return parser.parse_args()


def load_pages(path: str):
    if path.lower().endswith(".json"):
        return load_pdf2json(path)
    return extract_pdf_tokens(path)


def main():
    setup_logging()
    args = parse_args()

    if not health_check():
        logger.error("database_unreachable")
        return 2

    pipeline = SheriffSalePipeline()

    if args.init_db:
        create_all_tables()
        pipeline.reconciler.seed_config()

    if args.bid_list or args.postponements:
        bid_pages = load_pages(args.bid_list) if args.bid_list else []
        postponement_pages = load_pages(args.postponements) if args.postponements else []
        listings = pipeline.run_pages(bid_pages, postponement_pages)
    else:
        listings = pipeline.run()

    logger.info("run_pipeline_finished", listings=len(listings))
    return 0 if listings else 1


if __name__ == "__main__":
    sys.exit(main())
