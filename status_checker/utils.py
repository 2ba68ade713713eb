import asyncio
import ssl
import aiohttp
from .metrics import UrlStatusResult

def invalid_url_result(url: str) -> UrlStatusResult:
    """
    Convenience factory for a UrlStatusResult representing input that is not
    a URL even after scheme normalization. Used before any request is made so
    that the rest of the pipeline can treat it like any other result row.
    """
    return UrlStatusResult(
        original_url=url,
        final_url=url,
        status=400,
        status_text="Invalid URL",
        response_time_ms=0,
        error="Invalid URL format",
        method_used="validation",
    )

def unreachable_result(url: str, final_url: str, elapsed_ms: int, last_error: str | None) -> UrlStatusResult:
    """
    Convenience factory for the outcome of an exhausted strategy chain.
    """
    error = "All probe strategies failed"
    if last_error:
        error += f" (last error: {last_error})"
    return UrlStatusResult(
        original_url=url,
        final_url=final_url,
        status=0,
        status_text="Unreachable",
        response_time_ms=elapsed_ms,
        error=error,
        method_used="failed",
    )

# Exceptions that mean "no response obtained" for a single attempt.
# aiohttp wraps DNS, refused connections and TLS failures in ClientError
# subclasses; bare SSL errors can still surface from the transport, and
# ValueError covers URLs aiohttp refuses to build a request for.
NETWORK_ERRORS = (
    asyncio.TimeoutError,
    aiohttp.ClientError,
    ssl.SSLError,
    ValueError,
)
