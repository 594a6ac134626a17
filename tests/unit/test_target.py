"""Unit tests for render target resolution and loopback rewriting."""

import pytest

from resume_printer.contexts.printing.target import (
    RenderTarget,
    resolve_render_target,
    rewrite_loopback,
    uses_loopback,
)


@pytest.mark.unit
def test_loopback_public_and_storage_origins():
    """Public origin host becomes the container alias, port preserved."""
    target = resolve_render_target("http://localhost:3000", "http://localhost:3001/api")

    assert target.url == "http://host.docker.internal:3000"
    assert target.storage_url == "http://localhost:3001/api"
    assert target.requires_interception


@pytest.mark.unit
def test_public_https_origin_never_rewritten():
    target = resolve_render_target("https://example.com", "https://storage.example.com")

    assert target.url == "https://example.com"
    assert not target.requires_interception


@pytest.mark.unit
def test_loopback_storage_only_requires_interception():
    """Storage on localhost still needs interception even if the public origin is remote."""
    target = resolve_render_target("https://example.com", "http://localhost:9000/bucket")

    assert target.url == "https://example.com"
    assert target.requires_interception


@pytest.mark.unit
def test_custom_container_host():
    target = resolve_render_target(
        "http://localhost:5173", "http://localhost:3001", container_host="host.containers.internal"
    )

    assert target.url == "http://host.containers.internal:5173"
    assert target.container_host == "host.containers.internal"


@pytest.mark.unit
@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://localhost:3001/api/x", "http://host.docker.internal:3001/api/x"),
        ("http://localhost/api/x", "http://host.docker.internal/api/x"),
        ("https://127.0.0.1:8443/a", "https://host.docker.internal:8443/a"),
        ("https://example.com/localhost:3000", "https://example.com/localhost:3000"),
        ("http://localhostile.dev:3000", "http://localhostile.dev:3000"),
    ],
)
def test_rewrite_loopback(url, expected):
    assert rewrite_loopback(url) == expected


@pytest.mark.unit
def test_uses_loopback():
    assert uses_loopback("https://example.com", "http://localhost:3001")
    assert not uses_loopback("https://example.com", "https://cdn.example.com")
    assert not uses_loopback()


@pytest.mark.unit
def test_artboard_url_joins_path():
    target = RenderTarget(url="http://host.docker.internal:3000/", storage_url="http://x")

    assert target.artboard_url() == "http://host.docker.internal:3000/artboard/preview"
    assert target.artboard_url("artboard/print") == "http://host.docker.internal:3000/artboard/print"
