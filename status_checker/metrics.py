from dataclasses import dataclass
from typing import Iterable

@dataclass(frozen=True)
class UrlStatusResult:
    """
    Terminal per-URL outcome produced by the prober.

    Fields:
        original_url     : The URL exactly as supplied by the caller.
        final_url        : URL after redirects and/or host-variant substitution.
                           Equals the normalized original on total failure.
        status           : HTTP status code, or 0 when no response was obtained.
        status_text      : HTTP reason phrase, "Invalid URL" or "Unreachable".
        response_time_ms : Wall-clock time summed across every strategy tried.
        error            : Set only for unreachable (status 0) or invalid URLs.
        method_used      : Strategy that produced the result ("HEAD", "GET",
                           "with-www", "without-www", "switch-protocol"),
                           or "validation" / "failed".
    """
    original_url: str
    final_url: str
    status: int
    status_text: str
    response_time_ms: int
    error: str | None = None
    method_used: str | None = None

    def to_dict(self) -> dict:
        return {
            "Original URL": self.original_url,
            "Final URL": self.final_url,
            "Status": self.status,
            "Status Text": self.status_text,
            "Response Time (ms)": self.response_time_ms,
            "Error": self.error or "",
            "Method": self.method_used or "",
        }


@dataclass(frozen=True)
class CheckStats:
    """Summary counts over one finished (or partial) run."""
    total: int = 0
    live: int = 0
    redirect: int = 0
    client_error: int = 0
    server_error: int = 0
    avg_response_time_ms: int = 0
    success_rate: int = 0


def compute_stats(results: Iterable[UrlStatusResult]) -> CheckStats:
    """
    Aggregate results into summary counts.

    Average response time only covers results without an error, so
    unreachable and invalid URLs never drag it around. Success rate is
    live / total as a rounded percentage; redirects do not count.
    """
    # Imported here to avoid a circular import with the classifier
    from .classifier import StatusGroup, classify

    results = list(results)
    total = len(results)
    if total == 0:
        return CheckStats()

    counts = {group: 0 for group in StatusGroup}
    timed = []
    for r in results:
        counts[classify(r)] += 1
        if r.error is None:
            timed.append(r.response_time_ms)

    live = counts[StatusGroup.LIVE]
    return CheckStats(
        total=total,
        live=live,
        redirect=counts[StatusGroup.REDIRECT],
        client_error=counts[StatusGroup.CLIENT_ERROR],
        server_error=counts[StatusGroup.SERVER_ERROR],
        avg_response_time_ms=round(sum(timed) / len(timed)) if timed else 0,
        success_rate=round(live / total * 100),
    )


@dataclass(frozen=True)
class AttemptResult:
    """
    Outcome of one HTTP request made by a single strategy.

    Fields:
        url        : The URL that was requested.
        method     : HTTP method used ("HEAD" or "GET").
        elapsed_ms : Wall-clock time of this attempt.
        status     : HTTP status code, None if no response was obtained.
        reason     : HTTP reason phrase, if a response was obtained.
        final_url  : URL after following redirects, if a response was obtained.
        error_type : Exception name (e.g. "TimeoutError") when no response.
    """
    url: str
    method: str
    elapsed_ms: int
    status: int | None = None
    reason: str | None = None
    final_url: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 400
