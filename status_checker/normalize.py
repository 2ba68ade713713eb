"""URL normalization and validation ahead of any network access."""

import ipaddress
import re
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")

_SCHEME_PREFIX = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):(//)?")
# What follows "host:" when the input is really host:port
_PORT_THEN_PATH = re.compile(r"^\d*(?:[/?#]|$)")
_HOST_LABEL = re.compile(r"^(?!-)[a-z0-9_-]{1,63}(?<!-)$")


def normalize_url(raw: str) -> str | None:
    """Canonicalize user input into an http(s) URL, or None if it can't be one.

    - Trims surrounding whitespace
    - Prepends https:// when no scheme prefix is present (host:port counts
      as no scheme)
    - Rejects foreign schemes (opaque ones like mailto: too), missing or
      malformed hosts and bad ports
    """
    url = (raw or "").strip()
    if not url:
        return None

    match = _SCHEME_PREFIX.match(url)
    if match is None:
        url = f"https://{url}"
    elif match.group(2):
        if match.group(1).lower() not in ALLOWED_SCHEMES:
            return None
    elif _PORT_THEN_PATH.match(url[match.end():]):
        url = f"https://{url}"
    else:
        # mailto:, urn:, data: and other opaque schemes
        return None

    try:
        parts = urlsplit(url)
        # Raises ValueError for non-numeric or out-of-range ports
        parts.port
    except ValueError:
        return None

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return None
    if not is_valid_host(parts.hostname or ""):
        return None

    return url


def is_valid_host(host: str) -> bool:
    if not host:
        return False

    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass

    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return False

    labels = ascii_host.rstrip(".").split(".")
    return all(_HOST_LABEL.match(label) for label in labels)
