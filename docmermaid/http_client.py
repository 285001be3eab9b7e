# docmermaid/http_client.py
"""HTTP client configuration for downloading the mermaid runtime.

Honors the usual environment:
- HTTPS_PROXY / HTTP_PROXY (either case): explicit proxy URL
- NO_PROXY / no_proxy: hosts that bypass the proxy (suffix matching)
- REQUESTS_CA_BUNDLE / SSL_CERT_FILE: corporate CA bundle
"""

import logging
import os
import urllib.parse
from typing import List, Optional

logger = logging.getLogger(__name__)

# ============================================================
# Environment Variables
# ============================================================

ENV_HTTPS_PROXY = "HTTPS_PROXY"
ENV_HTTP_PROXY = "HTTP_PROXY"
ENV_NO_PROXY = "NO_PROXY"
ENV_CA_BUNDLES = ("REQUESTS_CA_BUNDLE", "SSL_CERT_FILE")


def get_proxy_url() -> Optional[str]:
    """Get proxy URL from environment variables, or None."""
    for var in [ENV_HTTPS_PROXY, ENV_HTTPS_PROXY.lower(),
                ENV_HTTP_PROXY, ENV_HTTP_PROXY.lower()]:
        url = os.environ.get(var)
        if url:
            return url
    return None


def _get_no_proxy_entries() -> List[str]:
    value = os.environ.get(ENV_NO_PROXY) or os.environ.get(ENV_NO_PROXY.lower(), "")
    if not value:
        return []
    return [e.strip().lower() for e in value.split(",") if e.strip()]


def should_bypass_proxy(url: str) -> bool:
    """Check if a URL's host matches an entry in NO_PROXY.

    ``*`` matches everything; ``example.com`` and ``.example.com`` match the
    domain and its subdomains.
    """
    host = urllib.parse.urlparse(url).hostname
    if not host:
        return False
    host = host.lower()

    for entry in _get_no_proxy_entries():
        if entry == "*":
            return True
        entry_host = entry.lstrip(".")
        if host == entry_host or host.endswith("." + entry_host):
            return True
    return False


def active_cert_bundle() -> Optional[str]:
    """Return the CA bundle path configured in the environment, if any."""
    for var in ENV_CA_BUNDLES:
        value = os.environ.get(var)
        if value:
            return value
    return None


def get_httpx_client(url: Optional[str] = None, **client_kwargs) -> "httpx.Client":
    """Create an httpx Client with proxy and SSL configuration.

    Args:
        url: Target URL, used to honor NO_PROXY.
        **client_kwargs: Additional kwargs for httpx.Client. Explicit
            ``verify`` or ``proxy`` values win over the environment.

    Returns:
        Configured httpx.Client.
    """
    import httpx

    ca_bundle = active_cert_bundle()
    if ca_bundle:
        if os.path.isfile(ca_bundle):
            client_kwargs.setdefault("verify", ca_bundle)
        else:
            logger.warning(
                "SSL CA bundle not found: %s (from REQUESTS_CA_BUNDLE or "
                "SSL_CERT_FILE). Falling back to default certificate verification.",
                ca_bundle,
            )

    proxy_url = get_proxy_url()
    if proxy_url and not (url and should_bypass_proxy(url)):
        client_kwargs.setdefault("proxy", proxy_url)

    return httpx.Client(**client_kwargs)
