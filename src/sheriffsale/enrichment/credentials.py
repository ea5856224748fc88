"""
Credential Pool

Valuation credentials are individually unreliable. The pool probes all of
them in parallel against a sample query and adopts the first one, in
configured order, that is accepted. The adopted credential is kept for the
rest of the run.
"""
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

Q = TypeVar("Q")


class CredentialPool:
    """
    Ordered credential tokens with first-success selection.

    Example:
        >>> pool = CredentialPool(settings.valuation_tokens)
        >>> token = pool.acquire(client.probe, queries)
    """

    def __init__(
        self,
        tokens: Iterable[str],
        executor_factory: Optional[Callable[[int], Executor]] = None
    ):
        self.tokens: List[str] = [token for token in tokens if token]
        self.executor_factory = executor_factory or (
            lambda workers: ThreadPoolExecutor(max_workers=workers)
        )
        self.active: Optional[str] = None

    def acquire(self, probe: Callable[[str, Q], bool], queries: Iterable[Q]) -> Optional[str]:
        """
        Return the adopted credential, probing for one if needed.

        Each query is tried in turn; for a query, every credential is probed
        concurrently and the first accepted one in configured order wins.

        Args:
            probe: Callable(token, query) returning True when accepted
            queries: Sample queries to probe with

        Returns:
            Adopted credential, or None when no credential was accepted
        """
        if self.active is not None:
            return self.active

        if not self.tokens:
            logger.error("valuation_credentials_missing")
            return None

        for attempt, query in enumerate(queries, start=1):
            with self.executor_factory(len(self.tokens)) as executor:
                futures = [
                    executor.submit(self._safe_probe, probe, token, query)
                    for token in self.tokens
                ]
                accepted = [future.result() for future in futures]

            for position, (token, ok) in enumerate(zip(self.tokens, accepted)):
                if ok:
                    self.active = token
                    logger.info("valuation_credential_adopted", position=position, attempt=attempt)
                    return token

            logger.warning("valuation_credential_probe_failed", attempt=attempt)

        logger.error("valuation_credentials_exhausted", tokens=len(self.tokens))
        return None

    @staticmethod
    def _safe_probe(probe: Callable[[str, Q], bool], token: str, query: Q) -> bool:
        try:
            return bool(probe(token, query))
        except Exception as e:
            logger.warning("valuation_probe_error", error=str(e), error_type=type(e).__name__)
            return False
