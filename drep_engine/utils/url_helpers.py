"""
URL helper utilities for DRep profile references.

This module provides functions for URL normalization and social-link validation.
"""

from urllib.parse import urlparse

# Domains accepted as a social presence on a DRep profile
SOCIAL_DOMAINS = (
    "twitter.com",
    "x.com",
    "github.com",
    "linkedin.com",
    "youtube.com",
    "medium.com",
    "t.me",
    "telegram.me",
    "discord.gg",
    "discord.com",
    "facebook.com",
    "instagram.com",
    "reddit.com",
)


def normalize_url(url: str) -> str:
    """
    Normalize a reference URI for de-duplication.

    Examples:
        >>> normalize_url(" https://Twitter.com/alice/ ")
        'https://twitter.com/alice'
        >>> normalize_url("github.com/alice")
        'https://github.com/alice'
    """
    url = url.strip()

    if url.startswith("//"):
        url = f"https:{url}"
    elif not url.startswith(("http://", "https://")):
        url = f"https://{url}"

    parsed = urlparse(url)
    path = parsed.path.rstrip("/")
    return f"{parsed.scheme}://{parsed.netloc.lower()}{path}"


def get_domain(url: str) -> str:
    """
    Host of a URL without a leading ``www.``.

    Examples:
        >>> get_domain("https://www.linkedin.com/in/alice")
        'linkedin.com'
    """
    netloc = urlparse(normalize_url(url)).netloc
    if netloc.startswith("www."):
        netloc = netloc[4:]
    return netloc.split(":")[0]


def is_social_link(url: str) -> bool:
    """
    True when the URL points at a known social platform.

    Examples:
        >>> is_social_link("https://twitter.com/alice")
        True
        >>> is_social_link("https://blog.example.com")
        False
    """
    if not url or not url.strip():
        return False
    domain = get_domain(url)
    return any(domain == d or domain.endswith(f".{d}") for d in SOCIAL_DOMAINS)
