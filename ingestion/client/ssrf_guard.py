"""
Outbound URL gate.

Every request the pipeline issues, the metadata fetch included, goes
through assert_allowed() first.
"""

import ipaddress
import socket
from typing import Iterable, Optional
from urllib.parse import urlsplit
import logging

from core.exceptions import DisallowedHost, InvalidUrl

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


def _is_blocked_address(address: str) -> bool:
    """True for loopback, link-local, private, reserved and unspecified addresses."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    
    return (
        ip.is_loopback
        or ip.is_link_local
        or ip.is_private
        or ip.is_reserved
        or ip.is_unspecified
        or ip.is_multicast
    )


def is_host_allowed(hostname: str, allowed_domains: Iterable[str]) -> bool:
    """Exact match or a subdomain of an allow-listed domain."""
    hostname = hostname.lower().rstrip(".")
    for domain in allowed_domains:
        domain = domain.lower().strip().rstrip(".")
        if not domain:
            continue
        if hostname == domain or hostname.endswith(f".{domain}"):
            return True
    return False


def _resolve(hostname: str) -> list:
    infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    return [info[4][0] for info in infos]


def assert_allowed(
    url: str,
    allowed_domains: Iterable[str],
    https_only: bool = False,
    resolve_dns: bool = False,
) -> str:
    """
    Validate an outbound URL before any network call is made.

    Args:
        url: Absolute URL about to be requested
        allowed_domains: Hostnames allowed, subdomains included
        https_only: Reject plain http URLs
        resolve_dns: Also resolve the hostname and reject private targets

    Returns:
        The hostname that passed the check

    Raises:
        InvalidUrl: Unparsable URL, missing host or unsupported scheme
        DisallowedHost: Host off the allow-list or pointing at a private,
            loopback or link-local address
    """
    allowed_domains = list(allowed_domains)
    
    try:
        parts = urlsplit(url)
        hostname: Optional[str] = parts.hostname
        # Accessing .port validates the port component
        parts.port
    except (ValueError, TypeError, AttributeError) as e:
        raise InvalidUrl(
            "Could not parse URL",
            context={"url": str(url)[:200]},
            original_exception=e
        )
    
    if parts.scheme not in ALLOWED_SCHEMES or not hostname:
        raise InvalidUrl(
            "URL must be absolute http(s) with a host",
            context={"url": url[:200], "scheme": parts.scheme}
        )
    
    if https_only and parts.scheme != "https":
        raise InvalidUrl(
            "Only https URLs are allowed",
            context={"url": url[:200]}
        )
    
    # IP literals are checked before the allow-list so that the error
    # names the real problem
    if _is_blocked_address(hostname):
        raise DisallowedHost(
            "Private, loopback or link-local address",
            context={"url": url[:200], "hostname": hostname}
        )
    
    if not is_host_allowed(hostname, allowed_domains):
        raise DisallowedHost(
            "Host is not on the allow-list",
            context={"url": url[:200], "hostname": hostname}
        )
    
    if resolve_dns:
        try:
            addresses = _resolve(hostname)
        except socket.gaierror as e:
            raise DisallowedHost(
                "Host could not be resolved",
                context={"url": url[:200], "hostname": hostname},
                original_exception=e
            )
        for address in addresses:
            if _is_blocked_address(address):
                raise DisallowedHost(
                    "Host resolves to a private address",
                    context={"url": url[:200], "hostname": hostname, "address": address}
                )
    
    return hostname
