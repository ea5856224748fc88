"""
SQLAlchemy ORM Models

Storage mirrors of the pydantic Listing model and the key/value config table.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.sheriffsale.db.base import Base, JSONType, TimestampMixin
from src.sheriffsale.models.listing import Coordinates, Listing


class ListingRecord(Base, TimestampMixin):
    """
    Sheriff sale listings.

    One row per auction number. Core columns are written by the reconciler;
    enrichment columns are written by the enrichment passes.
    """
    __tablename__ = "listings"

    auction_number: Mapped[str] = mapped_column(
        String(50),
        primary_key=True,
        comment="Auction number (natural key)"
    )
    docket_number: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Court docket number"
    )
    auction_id: Mapped[Optional[str]] = mapped_column(
        String(6),
        nullable=True,
        index=True,
        comment="Auction cycle code (MMYYYY)"
    )

    # Parties
    attorney_name: Mapped[str] = mapped_column(Text, default="", nullable=False)
    plaintiff_name: Mapped[str] = mapped_column(Text, default="", nullable=False)
    defendant_name: Mapped[str] = mapped_column(Text, default="", nullable=False)
    firm_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Sale
    sale_type: Mapped[str] = mapped_column(
        String(1),
        default="M",
        nullable=False,
        comment="M = mortgage, T = tax lien"
    )
    sale_status: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    reason_for_pp: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sale_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    pp_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    cost: Mapped[Optional[float]] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    cost_tax: Mapped[Optional[float]] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    judgment: Mapped[Optional[float]] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)

    # Flags
    is_fc: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_bank: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_pp: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_duplicate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    checks: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    # Location
    address: Mapped[Optional[List[str]]] = mapped_column(JSONType, nullable=True)
    municipality: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    document_position: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Order within the last parsed batch"
    )
    latitude: Mapped[Optional[float]] = mapped_column(Numeric(10, 7, asdecimal=False), nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Numeric(10, 7, asdecimal=False), nullable=True)

    # Enrichment
    zillow_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    zillow_invalid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    enrichment: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=True,
        comment="Per-source enrichment status"
    )

    def to_listing(self) -> Listing:
        """Convert the row back into a Listing."""
        coords = None
        if self.latitude is not None or self.longitude is not None:
            coords = Coordinates(latitude=self.latitude, longitude=self.longitude)

        return Listing(
            auction_number=self.auction_number,
            docket_number=self.docket_number,
            auction_id=self.auction_id,
            attorney_name=self.attorney_name,
            plaintiff_name=self.plaintiff_name,
            defendant_name=self.defendant_name,
            firm_name=self.firm_name,
            contact_email=self.contact_email,
            sale_type=self.sale_type or "M",
            sale_status=self.sale_status,
            reason_for_pp=self.reason_for_pp,
            sale_date=self.sale_date,
            pp_date=self.pp_date,
            cost=self.cost,
            cost_tax=self.cost_tax,
            judgment=self.judgment,
            is_fc=bool(self.is_fc),
            is_bank=bool(self.is_bank),
            is_pp=bool(self.is_pp),
            is_duplicate=bool(self.is_duplicate),
            checks=self.checks or {},
            address=self.address,
            municipality=self.municipality,
            document_position=self.document_position,
            coords=coords,
            zillow_data=self.zillow_data,
            zillow_invalid=bool(self.zillow_invalid),
            enrichment=self.enrichment or {},
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        return f"<ListingRecord(auction_number='{self.auction_number}', auction_id='{self.auction_id}')>"


class ConfigEntry(Base, TimestampMixin):
    """
    Key/value application configuration.

    Holds currentAuctionID and globalPPDate.
    """
    __tablename__ = "config_entries"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ConfigEntry(key='{self.key}', value='{self.value}')>"
