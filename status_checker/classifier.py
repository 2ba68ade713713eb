"""
Classifier module: maps a finished UrlStatusResult to a status group.

The logic is:
- explicit
- a pure function of (status, error)
- shared by summary stats and export filtering
"""

from enum import Enum
from typing import Iterable

from .metrics import UrlStatusResult


class StatusGroup(str, Enum):
    LIVE = "live"
    REDIRECT = "redirect"
    CLIENT_ERROR = "clientError"
    SERVER_ERROR = "serverError"


def classify(r: UrlStatusResult) -> StatusGroup:
    # Unreachable and invalid URLs share the error group
    if r.error is not None or r.status == 0:
        return StatusGroup.SERVER_ERROR

    if 200 <= r.status < 300:
        return StatusGroup.LIVE

    if 300 <= r.status < 400:
        return StatusGroup.REDIRECT

    if 400 <= r.status < 500:
        return StatusGroup.CLIENT_ERROR

    return StatusGroup.SERVER_ERROR


def filter_by_group(
    results: Iterable[UrlStatusResult],
    group: StatusGroup | str | None = None,
) -> list[UrlStatusResult]:
    """
    Keep only results in `group`. None or "all" keeps everything.
    """
    if group is None or group == "all":
        return list(results)
    group = StatusGroup(group)
    return [r for r in results if classify(r) is group]
