"""
Valuation API Client

Thin client over the Bridge public data API: zestimates, public parcel
records and public transaction records. Each endpoint returns a JSON body of
the form ``{"success": true, "bundle": [...]}``; only the first bundle entry
is used.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from config.settings import settings
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

ZESTIMATES_PATH = "zestimates"
PARCELS_PATH = "pub/parcels"
TRANSACTIONS_PATH = "pub/transactions"


@dataclass(frozen=True)
class ValuationQuery:
    """Street part of an address plus its ZIP code."""
    address: str
    city_state_zip: str

    @property
    def full_address(self) -> str:
        return f"{self.address} {self.city_state_zip}".strip()


@dataclass
class ValuationBundle:
    """
    First record of each endpoint for one address. Every block is optional.
    """
    zestimate: Optional[Dict[str, Any]] = None
    parcel: Optional[Dict[str, Any]] = None
    transaction: Optional[Dict[str, Any]] = None

    def is_empty(self) -> bool:
        return not (self.zestimate or self.parcel or self.transaction)


class ValuationClient:
    """
    Client for the valuation endpoints.

    Example:
        >>> client = ValuationClient()
        >>> bundle = client.lookup(token, ValuationQuery("123 Main St Pittsburgh PA", "15222"))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None
    ):
        self.base_url = (base_url or settings.valuation_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.valuation_timeout

    def probe(self, token: str, query: ValuationQuery) -> bool:
        """
        Check whether a credential is accepted.

        Args:
            token: API access token
            query: Any address, used as the probe request

        Returns:
            True when the API answers the request without an error
        """
        try:
            response = self.session.get(
                f"{self.base_url}/{ZESTIMATES_PATH}",
                params=self._params(token, ZESTIMATES_PATH, query),
                timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug("valuation_probe_failed", error=str(e), error_type=type(e).__name__)
            return False

        return isinstance(body, dict) and bool(body.get("success", True))

    def lookup(self, token: str, query: ValuationQuery) -> ValuationBundle:
        """
        Fetch the zestimate, parcel and transaction records of an address.

        A failing endpoint leaves its block empty; the other blocks are
        still returned.
        """
        return ValuationBundle(
            zestimate=self._first_record(token, ZESTIMATES_PATH, query),
            parcel=self._first_record(token, PARCELS_PATH, query),
            transaction=self._first_record(token, TRANSACTIONS_PATH, query),
        )

    def _first_record(self, token: str, path: str, query: ValuationQuery) -> Optional[Dict[str, Any]]:
        try:
            response = self.session.get(
                f"{self.base_url}/{path}",
                params=self._params(token, path, query),
                timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"unexpected {type(payload).__name__} body")
            bundle = payload.get("bundle") or []
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "api_request_failed",
                endpoint=path,
                address=query.full_address,
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        return bundle[0] if bundle and isinstance(bundle[0], dict) else None

    @staticmethod
    def _params(token: str, path: str, query: ValuationQuery) -> Dict[str, str]:
        params = {"access_token": token}
        if path == ZESTIMATES_PATH:
            params["address"] = query.full_address
        else:
            params["address.full"] = query.address
            params["address.zip"] = query.city_state_zip
        return params
