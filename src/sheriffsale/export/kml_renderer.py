"""
KML Renderer

Renders the listings of an auction as a KML document of styled placemarks.
"""
import calendar
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from config.settings import settings
from src.sheriffsale.models.listing import Listing, SaleType
from src.sheriffsale.utils.formatting import format_currency, format_number, format_short_date
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

KML_CONTENT_TYPE = "application/vnd.google-earth.kml+xml"
KML_NAMESPACE = "http://www.opengis.net/kml/2.2"
ICON_BASE_URL = "http://maps.google.com/mapfiles/ms/icons/"

# Initial camera over Allegheny County
LOOK_AT = (
    "<LookAt><longitude>-79.997</longitude><latitude>40.445</latitude><altitude>0</altitude>"
    "<heading>-148.4122922628044</heading><tilt>0</tilt><range>500000</range></LookAt>"
)


class MarkerType(str, Enum):
    """Placemark styles; values are the KML style ids."""

    INVALID = "zillowInvalid"
    STAYED = "stayPlacemark"
    FREE_AND_CLEAR = "freeAndClearPlacemark"
    FREE_AND_CLEAR_EXPENSIVE = "freeAndClearExpensivePlacemark"
    BANK = "bankPlacemark"
    BANK_EXPENSIVE = "bankExpensivePlacemark"
    TAX_LIEN = "taxLienPlacemark"
    TAX_LIEN_EXPENSIVE = "taxLienExpensivePlacemark"
    MORTGAGE = "mortgagePlacemark"
    MORTGAGE_EXPENSIVE = "mortgageExpensivePlacemark"

    @property
    def style_url(self) -> str:
        return f"#{self.value}"


MARKER_ICONS = {
    MarkerType.STAYED: "grey.png",
    MarkerType.MORTGAGE_EXPENSIVE: "red-dot.png",
    MarkerType.MORTGAGE: "red.png",
    MarkerType.TAX_LIEN_EXPENSIVE: "yellow-dot.png",
    MarkerType.TAX_LIEN: "yellow.png",
    MarkerType.FREE_AND_CLEAR_EXPENSIVE: "blue-dot.png",
    MarkerType.FREE_AND_CLEAR: "blue.png",
    MarkerType.BANK_EXPENSIVE: "green-dot.png",
    MarkerType.BANK: "green.png",
    MarkerType.INVALID: "orange.png",
}


def classify_marker(
    listing: Listing,
    global_pp_date: Optional[datetime],
    threshold: Optional[float] = None
) -> MarkerType:
    """
    Pick the placemark style of a listing. First matching rule wins.

    Args:
        listing: Listing to classify
        global_pp_date: Consensus postponement date of the auction
        threshold: Valuation above which the expensive variant is used

    Returns:
        MarkerType; plain mortgage if classification fails
    """
    limit = settings.expensive_threshold if threshold is None else threshold

    try:
        if listing.zillow_invalid:
            return MarkerType.INVALID
        if listing.sale_status == "STAYED":
            return MarkerType.STAYED
        if listing.pp_date and global_pp_date and listing.pp_date > global_pp_date:
            return MarkerType.STAYED

        estimate = listing.zillow_estimate
        expensive = estimate is not None and estimate > limit

        if listing.is_fc:
            return MarkerType.FREE_AND_CLEAR_EXPENSIVE if expensive else MarkerType.FREE_AND_CLEAR
        if listing.is_bank:
            return MarkerType.BANK_EXPENSIVE if expensive else MarkerType.BANK
        if listing.sale_type is SaleType.TAX_LIEN:
            return MarkerType.TAX_LIEN_EXPENSIVE if expensive else MarkerType.TAX_LIEN
        return MarkerType.MORTGAGE_EXPENSIVE if expensive else MarkerType.MORTGAGE
    except Exception as e:
        logger.warning(
            "marker_classification_failed",
            auction_number=listing.auction_number,
            error=str(e)
        )
        return MarkerType.MORTGAGE


def content_disposition(filename: Optional[str] = None) -> str:
    """Content-Disposition header value for serving the export."""
    return f'attachment; filename="{filename or settings.kml_filename}"'


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).replace("<", "").replace(">", "")


def _non_negative_currency(amount: Optional[float]) -> str:
    return format_currency(amount) if amount is not None and amount >= 0 else ""


def _positive_currency(amount: Optional[float]) -> str:
    return format_currency(amount) if amount else ""


def month_name(auction_id: str) -> str:
    """Month name of an MMYYYY auction code."""
    try:
        return calendar.month_name[int(auction_id[:2])]
    except (ValueError, IndexError, TypeError):
        return ""


class KmlRenderer:
    """
    Writes the map export of an auction.

    Example:
        >>> renderer = KmlRenderer(reconciler)
        >>> path = renderer.render("032019", global_pp_date)
    """

    def __init__(
        self,
        reconciler,
        export_path: Optional[str] = None,
        threshold: Optional[float] = None
    ):
        self.reconciler = reconciler
        self.export_path = Path(export_path or settings.kml_export_path)
        self.threshold = settings.expensive_threshold if threshold is None else threshold

    def render(self, auction_id: str, global_pp_date: Optional[datetime]) -> Path:
        """
        Render and write the export of an auction.

        Args:
            auction_id: Auction code (MMYYYY)
            global_pp_date: Consensus postponement date

        Returns:
            Path of the written document
        """
        listings = self.reconciler.mappable_listings(auction_id)
        document = self.build_document(auction_id, listings, global_pp_date)

        self.export_path.parent.mkdir(parents=True, exist_ok=True)
        self.export_path.write_text(document, encoding="utf-8")

        logger.info(
            "kml_exported",
            auction_id=auction_id,
            placemarks=len(listings),
            path=str(self.export_path)
        )
        return self.export_path

    def build_document(
        self,
        auction_id: str,
        listings: Iterable[Listing],
        global_pp_date: Optional[datetime]
    ) -> str:
        month = month_name(auction_id)
        parts: List[str] = [
            f'<kml xmlns="{KML_NAMESPACE}"><Document>',
            f"<name>{month}</name><open>1</open>",
            f"<description>{month} postponements</description><name>Placemarks</name>",
        ]
        for marker, icon in MARKER_ICONS.items():
            parts.append(
                f'<Style id="{marker.value}"><IconStyle><Icon><href>'
                f"{ICON_BASE_URL}{icon}</href></Icon></IconStyle></Style>"
            )
        parts.append(LOOK_AT)

        for listing in listings:
            if listing.is_mappable():
                parts.append(self.build_placemark(listing, global_pp_date))

        parts.append("</Document></kml>")
        return "".join(parts)

    def build_placemark(self, listing: Listing, global_pp_date: Optional[datetime]) -> str:
        """
        Render one placemark; ampersands are removed from the result.

        Returns:
            Placemark XML, or an empty string if rendering fails
        """
        marker = classify_marker(listing, global_pp_date, self.threshold)

        try:
            data = "".join(
                f'<Data name="{name}"><value>{_text(value)}</value></Data>'
                for name, value in self.extended_data(listing)
            )
            zillow = listing.zillow_data
            name = (zillow.zillow_address if zillow else None) or listing.primary_address

            placemark = (
                f"<Placemark><name>{_text(name)}</name>"
                f"<styleUrl>{marker.style_url}</styleUrl>"
                f"<ExtendedData>{data}</ExtendedData>"
                f"<Point><coordinates>{listing.coords.longitude},{listing.coords.latitude},0"
                f"</coordinates></Point></Placemark>"
            )
            return placemark.replace("&", "")
        except Exception as e:
            logger.warning(
                "placemark_render_failed",
                auction_number=listing.auction_number,
                error=str(e)
            )
            return ""

    @staticmethod
    def extended_data(listing: Listing) -> List[Tuple[str, object]]:
        """Ordered (name, value) pairs of a placemark's extended data."""
        zillow = listing.zillow_data

        def z(attribute: str):
            return getattr(zillow, attribute) if zillow else None

        fields: List[Tuple[str, object]] = [
            ("Auction Number", listing.auction_number),
            ("Sale Type", listing.sale_type.value),
            ("Judgment", _positive_currency(listing.judgment)),
            ("Tax Estimate", _positive_currency(z("tax_assessment"))),
            ("Zillow Estimate", _positive_currency(z("zillow_estimate"))),
            ("Zillow Rental Estimate", _non_negative_currency(z("zillow_rental_estimate"))),
            ("Last Sold Price", _positive_currency(z("last_sold_price"))),
            ("Last Sold Date", format_short_date(z("last_sold_date"))),
            ("Sqft", format_number(z("sqft")) if z("sqft") else ""),
            ("Rooms", z("rooms")),
            ("Baths", z("bath")),
            ("Year Built", z("year_built")),
            ("APN", z("apn")),
            ("Unpaid Balance", _non_negative_currency(z("unpaid_balance"))),
            ("Lender Name", z("lender_name")),
            ("Attorney Name", listing.attorney_name),
        ]
        if listing.firm_name:
            fields.append(("Firm Name", listing.firm_name))
        if listing.contact_email:
            fields.append(("Contact Email", listing.contact_email))
        fields.extend([
            ("Plaintiff Name", listing.plaintiff_name.replace("&", "and")),
            ("Cost Tax", _positive_currency(listing.cost_tax)),
            ("Checks", listing.checks.summary()),
            ("Docket Number", listing.docket_number),
            ("Zillow Link", z("zillow_link")),
            ("Duplicate", listing.is_duplicate),
        ])
        if listing.pp_date:
            fields.append(("PP Date", format_short_date(listing.pp_date)))
        return fields
