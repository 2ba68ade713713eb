import logging
from typing import Protocol

from .metrics import AttemptResult, UrlStatusResult
from .normalize import normalize_url
from .settings import CheckConfig
from .strategies import STRATEGY_CHAIN, Strategy
from .utils import invalid_url_result, unreachable_result

logger = logging.getLogger(__name__)


class RequestSender(Protocol):
    async def request(self, method: str, url: str) -> AttemptResult: ...


class UrlProber:
    """
    Resolves one raw URL string to exactly one UrlStatusResult.

    - Invalid input short-circuits to a 400 "Invalid URL" result
    - Otherwise walks the strategy chain until a response in [200, 400)
    - Time spent on every attempt is summed into response_time_ms
    """

    def __init__(
        self,
        sender: RequestSender,
        config: CheckConfig,
        strategies: tuple[Strategy, ...] = STRATEGY_CHAIN,
    ):
        self.sender = sender
        self.config = config
        self.strategies = strategies

    async def probe(self, raw_url: str) -> UrlStatusResult:
        url = normalize_url(raw_url)
        if url is None:
            logger.debug("Rejected invalid URL %r", raw_url)
            return invalid_url_result(raw_url)
        return await self.run_chain(raw_url, url)

    async def run_chain(self, original_url: str, url: str) -> UrlStatusResult:
        elapsed_ms = 0
        last_error = None
        # First real response >= 400, kept in case nothing better turns up
        fallback: tuple[Strategy, AttemptResult] | None = None

        for strategy in self.strategies:
            target = strategy.target(url)
            if target is None:
                continue

            attempt = await self.sender.request(strategy.method, target)
            elapsed_ms += attempt.elapsed_ms

            if attempt.ok:
                return _response_result(original_url, strategy, attempt, elapsed_ms)

            if attempt.status is None:
                last_error = attempt.error_type
            elif fallback is None:
                fallback = (strategy, attempt)

        if fallback is not None and self.config.keep_error_responses:
            strategy, attempt = fallback
            return _response_result(original_url, strategy, attempt, elapsed_ms)

        logger.debug("All strategies failed for %s", url)
        return unreachable_result(original_url, url, elapsed_ms, last_error)


def _response_result(original_url: str, strategy: Strategy, attempt: AttemptResult, elapsed_ms: int) -> UrlStatusResult:
    return UrlStatusResult(
        original_url=original_url,
        final_url=attempt.final_url or attempt.url,
        status=attempt.status,
        status_text=attempt.reason or "",
        response_time_ms=elapsed_ms,
        error=None,
        method_used=strategy.name,
    )
