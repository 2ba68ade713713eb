import logging
import time
from http import HTTPStatus

import aiohttp

from .metrics import AttemptResult
from .settings import CheckConfig, ProxySettings
from .utils import NETWORK_ERRORS

logger = logging.getLogger(__name__)

DEFAULT_HTTP_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

class HttpProber:
    """
    Single-request HTTP client built on aiohttp.

    - One request per call, redirects followed
    - Bounded by CheckConfig.attempt_timeout_s
    - Supports proxy usage
    - Never reads the response body; only status and final URL matter
    """

    def __init__(self, session: aiohttp.ClientSession, config: CheckConfig, proxy: ProxySettings | None = None):
        self.session = session
        self.config = config
        self.proxy = proxy

    async def request(self, method: str, url: str) -> AttemptResult:
        """
        Issue one request.

        Returns:
            AttemptResult with timing and status code, or with
            error_type set if no response was obtained.
        """
        t0 = time.perf_counter()

        proxy_url = self.proxy.url if (self.proxy and self.config.use_proxy) else None
        headers = {**DEFAULT_HTTP_HEADERS, "User-Agent": self.config.user_agent}
        extra = {} if self.config.verify_ssl else {"ssl": False}

        try:
            async with self.session.request(
                method, url, proxy=proxy_url, headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.config.attempt_timeout_s),
                allow_redirects=True, **extra
            ) as resp:
                elapsed_ms = _ms_since(t0)
                if not 100 <= resp.status <= 599:
                    return AttemptResult(url=url, method=method, elapsed_ms=elapsed_ms, error_type="InvalidStatus")
                return AttemptResult(
                    url=url, method=method, elapsed_ms=elapsed_ms, status=resp.status,
                    reason=resp.reason or _reason_phrase(resp.status), final_url=str(resp.url),
                )
        except NETWORK_ERRORS as e:
            elapsed_ms = _ms_since(t0)
            logger.debug("%s %s failed after %d ms: %r", method, url, elapsed_ms, e)
            return AttemptResult(url=url, method=method, elapsed_ms=elapsed_ms, error_type=type(e).__name__)


def _ms_since(t0: float) -> int:
    return max(0, round((time.perf_counter() - t0) * 1000))


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""
