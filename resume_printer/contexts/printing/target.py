"""
Render target resolution for containerized development setups.

The rendering engine runs in its own container, so `localhost` in the public or
storage URL points at the container itself rather than the host machine serving
the front end. When either configured origin is a loopback address, the host is
swapped for a container-reachable alias (default `host.docker.internal`), keeping
the port, and storage requests are intercepted so assets resolve the same way.
"""

import re
from dataclasses import dataclass

DEFAULT_CONTAINER_HOST = "host.docker.internal"

LOOPBACK_URL_PATTERN = re.compile(r"^(https?://)(localhost|127\.0\.0\.1)(:\d+)?(?=[/?#]|$)")


def uses_loopback(*urls: str) -> bool:
    """True if any URL points at a loopback host (optionally with a port)."""
    return any(LOOPBACK_URL_PATTERN.match(url) for url in urls)


def rewrite_loopback(url: str, container_host: str = DEFAULT_CONTAINER_HOST) -> str:
    """
    Swap a loopback host for the container alias, preserving scheme, port and path.

    Examples:
        >>> rewrite_loopback("http://localhost:3000")
        'http://host.docker.internal:3000'
        >>> rewrite_loopback("https://example.com")
        'https://example.com'
    """
    return LOOPBACK_URL_PATTERN.sub(
        lambda match: f"{match.group(1)}{container_host}{match.group(3) or ''}", url, count=1
    )


@dataclass(frozen=True)
class RenderTarget:
    """
    Where the rendering engine should navigate and how storage requests are treated.

    Attributes:
        url: Effective public origin to navigate to
        storage_url: Configured storage origin (as the front end requests it)
        container_host: Alias used when rewriting loopback hosts
        requires_interception: Whether storage requests must be rewritten in the tab
    """

    url: str
    storage_url: str
    container_host: str = DEFAULT_CONTAINER_HOST
    requires_interception: bool = False

    def artboard_url(self, path: str = "/artboard/preview") -> str:
        return f"{self.url.rstrip('/')}/{path.lstrip('/')}"


def resolve_render_target(
    public_url: str, storage_url: str, container_host: str = DEFAULT_CONTAINER_HOST
) -> RenderTarget:
    """
    Compute the externally reachable front end origin for the rendering engine.

    Args:
        public_url: Configured public origin of the front end
        storage_url: Configured storage origin
        container_host: Alias reachable from inside the engine's container

    Returns:
        RenderTarget; the public origin is rewritten only if it is itself loopback,
        but interception is required whenever either origin is loopback.
    """
    if not uses_loopback(public_url, storage_url):
        return RenderTarget(url=public_url, storage_url=storage_url, container_host=container_host)

    return RenderTarget(
        url=rewrite_loopback(public_url, container_host),
        storage_url=storage_url,
        container_host=container_host,
        requires_interception=True,
    )
