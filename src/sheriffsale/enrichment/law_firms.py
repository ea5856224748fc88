"""
Law Firm Enrichment

Matches each listing's attorney against a lookup table of law firms kept in
a spreadsheet. The sheet has a header row followed by four columns: name on
file, firm details, firm remarks (contact) and comments.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from config.settings import settings
from src.sheriffsale.enrichment.base import EnrichmentPass, PassResult
from src.sheriffsale.models.listing import Listing
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

COLUMNS = ["name_on_file", "firm_details", "firm_remarks", "comments"]


@dataclass(frozen=True)
class LawFirm:
    name_on_file: str
    firm_details: str = ""
    firm_remarks: str = ""
    comments: str = ""


class LawFirmTable:
    """
    Ordered law firm lookup table.

    Example:
        >>> table = LawFirmTable.from_excel("data/lawFirms.xlsx")
        >>> table.match("KML LAW GROUP PC").firm_details
    """

    def __init__(self, firms: Iterable[LawFirm]):
        self.firms: List[LawFirm] = list(firms)

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "LawFirmTable":
        firms = []
        for record in records:
            values = {column: str(record.get(column) or "").strip() for column in COLUMNS}
            firms.append(LawFirm(**values))
        return cls(firms)

    @classmethod
    def from_excel(
        cls,
        path: Union[str, Path, None] = None,
        sheet: Optional[str] = None
    ) -> "LawFirmTable":
        """
        Load the table from a spreadsheet.

        Args:
            path: Workbook path (defaults to settings)
            sheet: Sheet name (defaults to settings)
        """
        path = path or settings.law_firms_excel
        frame = pd.read_excel(
            path,
            sheet_name=sheet or settings.law_firms_sheet,
            header=None,
            skiprows=1,
            dtype=str,
        )
        frame = frame.iloc[:, :len(COLUMNS)]
        frame.columns = COLUMNS[:frame.shape[1]]
        frame = frame.reindex(columns=COLUMNS).fillna("")

        table = cls.from_records(frame.to_dict("records"))
        logger.info("law_firms_loaded", path=str(path), firms=len(table.firms))
        return table

    def match(self, attorney_name: str) -> Optional[LawFirm]:
        """First firm whose name on file appears in the attorney name."""
        if not attorney_name:
            return None
        for firm in self.firms:
            if firm.name_on_file and firm.name_on_file in attorney_name:
                return firm
        return None


class LawFirmEnricher(EnrichmentPass):
    source = "law_firms"

    def __init__(self, reconciler, table: Optional[LawFirmTable] = None, clock=None):
        super().__init__(reconciler, clock)
        self.table = table

    def enrich(self, listings: List[Listing]) -> PassResult:
        """
        Copy firm name and contact onto every listing.

        Listings without a match get empty strings.
        """
        result = PassResult()
        if self.table is None:
            try:
                self.table = LawFirmTable.from_excel()
            except (OSError, ValueError) as e:
                logger.error("law_firms_unavailable", error=str(e), error_type=type(e).__name__)
                result.skipped = len(listings)
                return result

        for listing in listings:
            result.attempted += 1
            firm = self.table.match(listing.attorney_name)
            firm_name = firm.firm_details if firm else ""
            contact_email = firm.firm_remarks if firm else ""

            if listing.firm_name == firm_name and listing.contact_email == contact_email:
                continue

            updated = listing.model_copy(
                update={"firm_name": firm_name, "contact_email": contact_email}
            )
            if self.reconciler.save_listing(updated, ("firm_name", "contact_email")) is None:
                result.failed += 1
            else:
                result.enriched += 1

        logger.info("law_firms_matched", listings=result.attempted, updated=result.enriched)
        return result
