"""
Ordered probe strategies for a single normalized URL.

Each strategy is plain data: a name, the HTTP method to use and a rewrite
function that returns the URL to request, or None when the strategy does not
apply to this URL. The prober walks STRATEGY_CHAIN in order and stops at the
first response in [200, 400).

Cheap checks come first (HEAD, then GET). The host and scheme variants only
help against misconfigured DNS/vhost setups.
"""

import ipaddress
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit, urlunsplit


@dataclass(frozen=True)
class Strategy:
    name: str
    method: str
    rewrite: Callable[[str], str | None]

    def target(self, url: str) -> str | None:
        return self.rewrite(url)


def _replace_host(url: str, host: str) -> str:
    parts = urlsplit(url)
    # Keep userinfo and port untouched
    userinfo, _, hostport = parts.netloc.rpartition("@")
    old_host = parts.hostname or ""
    idx = hostport.lower().find(old_host)
    if idx == -1:
        new_hostport = host
    else:
        new_hostport = hostport[:idx] + host + hostport[idx + len(old_host):]
    netloc = f"{userinfo}@{new_hostport}" if userinfo else new_hostport
    return urlunsplit(parts._replace(netloc=netloc))


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def same_url(url: str) -> str:
    return url


def with_www(url: str) -> str | None:
    host = urlsplit(url).hostname or ""
    if not host or host.startswith("www.") or _is_ip(host):
        return None
    return _replace_host(url, f"www.{host}")


def without_www(url: str) -> str | None:
    host = urlsplit(url).hostname or ""
    if not host.startswith("www."):
        return None
    return _replace_host(url, host[len("www."):])


def switch_protocol(url: str) -> str | None:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme == "https":
        return urlunsplit(parts._replace(scheme="http"))
    if scheme == "http":
        return urlunsplit(parts._replace(scheme="https"))
    return None


STRATEGY_CHAIN: tuple[Strategy, ...] = (
    Strategy("HEAD", "HEAD", same_url),
    Strategy("GET", "GET", same_url),
    Strategy("with-www", "GET", with_www),
    Strategy("without-www", "GET", without_www),
    Strategy("switch-protocol", "GET", switch_protocol),
)
