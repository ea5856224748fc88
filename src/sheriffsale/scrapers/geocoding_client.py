"""
Geocoding Client

Forward geocoding through the Google Geocoding JSON API.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from config.settings import settings
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeocodeCandidate:
    """One geocoding result."""
    latitude: float
    longitude: float
    zipcode: Optional[str]
    formatted_address: str


class GeocodingClient:
    """
    Geocodes free-form addresses.

    Example:
        >>> client = GeocodingClient()
        >>> candidates = client.geocode("123 Main St Pittsburgh PA 15222")
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None
    ):
        self.url = url or settings.geocoding_url
        self.api_key = api_key if api_key is not None else settings.geocoding_api_key
        self.session = session or requests.Session()
        self.timeout = timeout or settings.geocoding_timeout

    def geocode(self, address: str) -> List[GeocodeCandidate]:
        """
        Geocode one address.

        Args:
            address: Address text

        Returns:
            Candidates in API order; empty when the request fails or nothing matched
        """
        params = {"address": address}
        if self.api_key:
            params["key"] = self.api_key

        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(
                "api_request_failed",
                address=address,
                error=str(e),
                error_type=type(e).__name__
            )
            return []

        status = body.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning("geocoding_status_error", address=address, status=status)
            return []

        candidates = []
        for result in body.get("results", []):
            candidate = self._parse_result(result)
            if candidate:
                candidates.append(candidate)

        logger.debug("geocoding_complete", address=address, candidates=len(candidates))
        return candidates

    @staticmethod
    def _parse_result(result: Dict[str, Any]) -> Optional[GeocodeCandidate]:
        location = result.get("geometry", {}).get("location", {})
        if location.get("lat") is None or location.get("lng") is None:
            return None

        zipcode = None
        for component in result.get("address_components", []):
            if "postal_code" in component.get("types", []):
                zipcode = component.get("long_name") or component.get("short_name")
                break

        return GeocodeCandidate(
            latitude=float(location["lat"]),
            longitude=float(location["lng"]),
            zipcode=zipcode,
            formatted_address=result.get("formatted_address", ""),
        )
