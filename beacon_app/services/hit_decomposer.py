"""
Turns one inbound request into a Hit: site, page and client identity.

Pure function, no store access. Any rejection happens here, before a
single counter is touched.
"""

import ipaddress
import logging
import re
from typing import Optional
from urllib.parse import urlsplit, unquote

from beacon_app.exceptions import InvalidCallbackError, InvalidReferrerError, MissingCallbackError
from beacon_app.schemas.beacon import Hit

logger = logging.getLogger(__name__)

# Dotted JavaScript identifier, e.g. "cb", "jQuery123_456" or "window.stats.show"
CALLBACK_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")

# RFC 3986 reg-name: unreserved, sub-delims and pct-encoded octets
REG_NAME_PATTERN = re.compile(r"^(?:[A-Za-z0-9\-._~!$&'()*+,;=]|%[0-9A-Fa-f]{2})+$")
BAD_ESCAPE_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x1f\x7f]")


def _split_host(netloc: str) -> str:
    """Host part of a netloc with userinfo, port and IPv6 brackets removed, case kept"""
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[1:host.find("]")]
    return host.partition(":")[0]


def _valid_host(host: str, bracketed: bool) -> bool:
    if bracketed:
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True
    return bool(REG_NAME_PATTERN.match(host))


def parse_referrer(referrer: str) -> tuple:
    """
    Split an absolute URL into (hostname, path).
    
    The hostname keeps its case and the path is percent-decoded; an
    empty path stays empty.
    
    Raises:
        InvalidReferrerError: If the URL has no scheme or host, or is malformed
    """
    if CONTROL_CHAR_PATTERN.search(referrer):
        raise InvalidReferrerError(f"Control character in referrer {referrer!r}")
    
    try:
        parts = urlsplit(referrer)
        parts.port  # Raises ValueError on a non-numeric or out-of-range port
    except ValueError as e:
        raise InvalidReferrerError(f"Unparseable referrer {referrer!r}: {e}") from e
    
    host = _split_host(parts.netloc)
    if not parts.scheme or not host:
        raise InvalidReferrerError(f"Referrer is not an absolute URL: {referrer!r}")
    
    bracketed = parts.netloc.rpartition("@")[2].startswith("[")
    if not _valid_host(host, bracketed):
        raise InvalidReferrerError(f"Invalid host {host!r} in referrer {referrer!r}")
    
    if BAD_ESCAPE_PATTERN.search(parts.path):
        raise InvalidReferrerError(f"Invalid escape in referrer path {referrer!r}")
    
    try:
        path = unquote(parts.path, errors="strict")
    except UnicodeDecodeError as e:
        raise InvalidReferrerError(f"Referrer path is not UTF-8 {referrer!r}: {e}") from e
    
    return host, path


def decompose_hit(
    referrer: Optional[str],
    callback: Optional[str],
    client_id: str,
    strict_callback: bool = False
) -> Hit:
    """
    Build a Hit from the raw request values.
    
    Args:
        referrer: Referring page URL (the Referer header)
        callback: JSONP callback name (jsonpCallback query parameter)
        client_id: Client identity (IP address)
        strict_callback: Only accept callbacks that are JavaScript identifiers
        
    Returns:
        Hit ready for aggregation
        
    Raises:
        MissingCallbackError: Callback or referrer is empty
        InvalidCallbackError: strict_callback is set and the callback isn't an identifier
        InvalidReferrerError: Referrer can't be parsed
    """
    if not callback or not referrer:
        raise MissingCallbackError("jsonpCallback and Referer are required")
    
    if strict_callback and not CALLBACK_PATTERN.match(callback):
        raise InvalidCallbackError(f"Callback is not an identifier: {callback!r}")
    
    try:
        host, path = parse_referrer(referrer)
    except InvalidReferrerError as e:
        logger.error(str(e))
        raise
    
    return Hit(host=host, path=path, client_id=client_id, callback=callback)
