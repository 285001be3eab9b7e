"""Tests for HTTP client proxy and SSL configuration."""

import os
from unittest import mock

import pytest

from docmermaid.http_client import (
    active_cert_bundle,
    get_httpx_client,
    get_proxy_url,
    should_bypass_proxy,
)

_PROXY_VARS = [
    "HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy",
    "NO_PROXY", "no_proxy", "REQUESTS_CA_BUNDLE", "SSL_CERT_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _PROXY_VARS:
        monkeypatch.delenv(var, raising=False)


class TestProxyConfiguration:
    """Tests for reading proxy settings from the environment."""

    def test_no_proxy_configured(self):
        assert get_proxy_url() is None

    def test_https_proxy_preferred(self, monkeypatch):
        monkeypatch.setenv("HTTP_PROXY", "http://plain:8080")
        monkeypatch.setenv("HTTPS_PROXY", "http://secure:8080")
        assert get_proxy_url() == "http://secure:8080"

    def test_lowercase_variable(self, monkeypatch):
        monkeypatch.setenv("http_proxy", "http://lower:3128")
        assert get_proxy_url() == "http://lower:3128"

    def test_bypass_exact_host(self, monkeypatch):
        monkeypatch.setenv("NO_PROXY", "unpkg.com")
        assert should_bypass_proxy("https://unpkg.com/mermaid") is True

    def test_bypass_subdomain(self, monkeypatch):
        monkeypatch.setenv("NO_PROXY", ".example.com")
        assert should_bypass_proxy("https://cdn.example.com/x") is True
        assert should_bypass_proxy("https://example.org/x") is False

    def test_bypass_wildcard(self, monkeypatch):
        monkeypatch.setenv("no_proxy", "*")
        assert should_bypass_proxy("https://anything.test/") is True

    def test_no_bypass_without_host(self, monkeypatch):
        monkeypatch.setenv("NO_PROXY", "*")
        assert should_bypass_proxy("not a url") is False


class TestCertBundle:
    """Tests for CA bundle discovery."""

    def test_none_by_default(self):
        assert active_cert_bundle() is None

    def test_requests_ca_bundle(self, monkeypatch):
        monkeypatch.setenv("REQUESTS_CA_BUNDLE", "/etc/ssl/corp.pem")
        assert active_cert_bundle() == "/etc/ssl/corp.pem"


class TestGetHttpxClient:
    """Tests for client construction."""

    @mock.patch("httpx.Client")
    def test_proxy_applied(self, mock_client, monkeypatch):
        monkeypatch.setenv("HTTPS_PROXY", "http://proxy:8080")
        get_httpx_client("https://unpkg.com/x")
        assert mock_client.call_args.kwargs["proxy"] == "http://proxy:8080"

    @mock.patch("httpx.Client")
    def test_proxy_skipped_for_no_proxy_host(self, mock_client, monkeypatch):
        monkeypatch.setenv("HTTPS_PROXY", "http://proxy:8080")
        monkeypatch.setenv("NO_PROXY", "unpkg.com")
        get_httpx_client("https://unpkg.com/x")
        assert "proxy" not in mock_client.call_args.kwargs

    @mock.patch("httpx.Client")
    def test_existing_ca_bundle_used(self, mock_client, monkeypatch, tmp_path):
        bundle = tmp_path / "ca.pem"
        bundle.write_text("cert", encoding="utf-8")
        monkeypatch.setenv("SSL_CERT_FILE", str(bundle))
        get_httpx_client()
        assert mock_client.call_args.kwargs["verify"] == str(bundle)

    @mock.patch("httpx.Client")
    def test_missing_ca_bundle_ignored(self, mock_client, monkeypatch):
        monkeypatch.setenv("SSL_CERT_FILE", os.path.join("no", "such", "ca.pem"))
        get_httpx_client()
        assert "verify" not in mock_client.call_args.kwargs

    @mock.patch("httpx.Client")
    def test_explicit_kwargs_win(self, mock_client, monkeypatch):
        monkeypatch.setenv("HTTPS_PROXY", "http://proxy:8080")
        get_httpx_client(proxy="http://other:1", timeout=5)
        kwargs = mock_client.call_args.kwargs
        assert kwargs["proxy"] == "http://other:1"
        assert kwargs["timeout"] == 5
