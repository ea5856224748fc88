"""
Listing Data Models

Pydantic models for sheriff sale listings and their enrichment bundles.
"""
import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator


class SaleType(str, Enum):
    """Sale basis of a listing."""

    MORTGAGE = "M"
    TAX_LIEN = "T"


class EnrichmentStatus(str, Enum):
    """Per-source enrichment status used by the freshness gate."""

    NOT_ATTEMPTED = "not_attempted"
    STALE = "stale"
    VALID = "valid"
    FAILED = "failed"


class EnrichmentState(BaseModel):
    """Last known outcome of one enrichment source for a listing."""

    status: EnrichmentStatus = Field(EnrichmentStatus.NOT_ATTEMPTED, description="Last outcome")
    updated_at: Optional[datetime] = Field(None, description="When the outcome was recorded")


class ListingChecks(BaseModel):
    """
    The three checkbox columns of the bid list.

    Attributes:
        svs: SVS column
        n3129: 3129 notice column (serialized as "3129")
        ok: OK column
    """

    svs: bool = False
    n3129: bool = Field(False, alias="3129")
    ok: bool = False

    @field_validator("svs", "n3129", "ok", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        """Checks are always booleans; a "Y" mark counts as checked."""
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip() == "Y"
        return bool(v)

    def summary(self) -> str:
        """Render as the "Y X Y" marker string used on the bid list."""
        return " ".join("Y" if flag else "X" for flag in (self.svs, self.n3129, self.ok))

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class Coordinates(BaseModel):
    """WGS84 point."""

    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    def is_complete(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class ZillowData(BaseModel):
    """
    Valuation bundle layered onto a listing by the valuation pass.

    Every attribute is optional; the upstream zestimate, parcel and
    transaction blocks are independently optional.
    """

    zillow_estimate: Optional[float] = None
    zillow_rental_estimate: Optional[float] = None
    tax_assessment: Optional[float] = None
    rooms: Optional[float] = None
    bath: Optional[float] = None
    sqft: Optional[float] = None
    year_built: Optional[int] = None
    zillow_id: Optional[str] = None
    zillow_link: Optional[str] = None
    zillow_address: Optional[str] = None
    last_sold_price: Optional[float] = None
    last_sold_date: Optional[str] = None
    lender_name: Optional[str] = None
    apn: Optional[str] = None
    unpaid_balance: Optional[float] = None
    last_zillow_update: Optional[datetime] = None

    @field_validator("zillow_id", "apn", "last_sold_date", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)


# Fields written by the parser/normalizer. Enrichment passes never touch these
# and the reconciler never writes anything else.
CORE_FIELDS = (
    "auction_number",
    "docket_number",
    "auction_id",
    "attorney_name",
    "plaintiff_name",
    "defendant_name",
    "sale_type",
    "sale_status",
    "reason_for_pp",
    "is_fc",
    "is_bank",
    "is_pp",
    "is_duplicate",
    "sale_date",
    "pp_date",
    "cost",
    "cost_tax",
    "checks",
    "address",
    "municipality",
    "document_position",
)


class Listing(BaseModel):
    """
    One property auction entry extracted from a sheriff sale document.

    Attributes:
        auction_number: Natural key, unique across the system
        docket_number: Court docket number (record anchor in the document)
        auction_id: Month+year code of the auction cycle (MMYYYY)
        sale_type: Mortgage or tax lien sale
        is_fc: Free-and-clear marker seen in the address span
        is_bank: Plaintiff is a known bank
        is_pp: Listing came from the postponement list
        is_duplicate: More than one address was collected for the record
        document_position: Order of the listing in the batch it was last parsed from
        address: Raw address strings, primary first
        zillow_invalid: Valuation was attempted and yielded nothing usable
        enrichment: Per-source enrichment states
    """

    auction_number: str = Field(..., min_length=1, description="Auction number")
    docket_number: Optional[str] = Field(None, description="Docket number")
    auction_id: Optional[str] = Field(None, description="Auction cycle code (MMYYYY)")
    attorney_name: str = Field("", description="Attorney on file")
    plaintiff_name: str = Field("", description="Plaintiff")
    defendant_name: str = Field("", description="Defendant")
    firm_name: Optional[str] = Field(None, description="Law firm (from lookup table)")
    contact_email: Optional[str] = Field(None, description="Law firm contact")
    sale_type: SaleType = Field(SaleType.MORTGAGE, description="Sale basis")
    sale_status: Optional[str] = Field(None, description="Free text status, e.g. STAYED")
    reason_for_pp: Optional[str] = Field(None, description="Reason for postponement")
    is_fc: bool = False
    is_bank: bool = False
    is_pp: bool = False
    is_duplicate: bool = False
    sale_date: Optional[datetime] = None
    pp_date: Optional[datetime] = None
    cost: Optional[float] = None
    cost_tax: Optional[float] = None
    judgment: Optional[float] = None
    checks: ListingChecks = Field(default_factory=ListingChecks)
    address: List[str] = Field(default_factory=list)
    municipality: str = ""
    document_position: Optional[int] = Field(None, description="Position in the parsed batch")
    coords: Optional[Coordinates] = None
    zillow_data: Optional[ZillowData] = None
    zillow_invalid: bool = False
    enrichment: Dict[str, EnrichmentState] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("address", mode="before")
    @classmethod
    def coerce_address(cls, v: Any) -> List[str]:
        """Address is always a list, never a bare string."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v else []
        return [str(item) for item in v if item is not None]

    @field_validator("cost", "cost_tax", "judgment")
    @classmethod
    def finite_amount(cls, v: Optional[float]) -> Optional[float]:
        if v is None or not math.isfinite(v):
            return None
        return v

    @field_validator("attorney_name", "plaintiff_name", "defendant_name", "municipality", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, list):
            return " ".join(str(item) for item in v)
        return str(v)

    @property
    def primary_address(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def zillow_estimate(self) -> Optional[float]:
        return self.zillow_data.zillow_estimate if self.zillow_data else None

    def has_coordinates(self) -> bool:
        """Check if listing has a complete coordinate pair."""
        return self.coords is not None and self.coords.is_complete()

    def is_mappable(self) -> bool:
        """Coordinates present and not the degenerate 0,0 pair."""
        return (
            self.has_coordinates()
            and self.coords.latitude != 0
            and self.coords.longitude != 0
        )

    def core_fields(self) -> Dict[str, Any]:
        """Parser-owned fields, as written by the reconciler."""
        return self.to_record(CORE_FIELDS)

    def to_record(self, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Convert to a dictionary of storage columns.

        Args:
            fields: Model fields to include (all persisted fields if None)

        Returns:
            Column name to value mapping with JSON-safe nested values
        """
        names = fields or [
            name for name in type(self).model_fields if name not in ("created_at", "updated_at")
        ]
        record: Dict[str, Any] = {}
        for name in names:
            if name == "coords":
                record["latitude"] = self.coords.latitude if self.coords else None
                record["longitude"] = self.coords.longitude if self.coords else None
            elif name == "checks":
                record["checks"] = self.checks.model_dump(by_alias=True)
            elif name == "zillow_data":
                record["zillow_data"] = (
                    self.zillow_data.model_dump(mode="json") if self.zillow_data else None
                )
            elif name == "enrichment":
                record["enrichment"] = {
                    source: state.model_dump(mode="json")
                    for source, state in self.enrichment.items()
                }
            elif name == "sale_type":
                record["sale_type"] = self.sale_type.value
            elif name == "address":
                record["address"] = list(self.address)
            else:
                record[name] = getattr(self, name)
        return record

    class Config:
        """Pydantic model configuration."""
        str_strip_whitespace = True
        validate_assignment = True
