"""
Domain extraction for tab URLs.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

from urllib.parse import urlsplit


def extract_domain(url: str) -> str:
    """Return the lower-cased host of url without a leading "www.".

    Returns "" when the URL has no network location (e.g. "about:blank") or
    cannot be parsed.

    Examples:
        extract_domain("https://www.example.com/a?b=c")  # "example.com"
        extract_domain("http://user@Docs.Example.org:8080/")  # "docs.example.org"
    """
    if not url:
        return ""
    try:
        host = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    if host.startswith("www."):
        host = host[4:]
    return host
