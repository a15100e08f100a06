"""Tests for npm registry access."""

from unittest.mock import patch

import httpx
import pytest

from repack.errors import PipelineError
from repack.registry import NpmRegistry


def _registry(handler) -> NpmRegistry:
    return NpmRegistry("https://registry.example.test/", transport=httpx.MockTransport(handler))


class TestListVersions:
    """Test querying published versions."""

    def test_lists_version_keys(self):
        """Should return the keys of the packument's versions mapping."""
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"versions": {"323.0.1": {}, "323.0.2": {}}})

        assert _registry(handler).list_versions("cockpit-base1") == ["323.0.1", "323.0.2"]
        assert seen == ["https://registry.example.test/cockpit-base1"]

    def test_scoped_package_url(self):
        """Should encode the slash of scoped package names."""
        seen = []

        def handler(request):
            seen.append(request.url.raw_path.decode())
            return httpx.Response(200, json={"versions": {}})

        _registry(handler).list_versions("@cockpit/base1")
        assert seen == ["/@cockpit%2Fbase1"]

    def test_unpublished_package(self):
        """Should return an empty list on 404."""
        assert _registry(lambda request: httpx.Response(404)).list_versions("nope") == []

    def test_server_error_is_not_fatal(self):
        """Should treat a failing registry as having no versions."""
        assert _registry(lambda request: httpx.Response(503)).list_versions("cockpit-base1") == []

    def test_network_error_is_not_fatal(self):
        """Should treat a network failure as having no versions."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert _registry(handler).list_versions("cockpit-base1") == []

    def test_invalid_json_is_not_fatal(self):
        """Should treat a non-JSON body as having no versions."""
        response = httpx.Response(200, content=b"<html>oops</html>")
        assert _registry(lambda request: response).list_versions("cockpit-base1") == []

    def test_unexpected_shape_is_not_fatal(self):
        """Should treat an unexpected document as having no versions."""
        assert _registry(lambda request: httpx.Response(200, json=["323.0.1"])).list_versions("x") == []
        assert _registry(lambda request: httpx.Response(200, json={"versions": ["1"]})).list_versions("x") == []


class TestPublish:
    """Test publishing through the npm CLI."""

    def test_publish_runs_npm_in_package_dir(self, tmp_path):
        """Should run npm publish --access public inside the package directory."""
        registry = NpmRegistry("https://registry.example.test")

        with patch("repack.registry.run") as mock_run:
            registry.publish(tmp_path)

        mock_run.assert_called_once_with(
            ["npm", "publish", "--access", "public", "--registry", "https://registry.example.test"],
            cwd=tmp_path,
        )

    def test_publish_dry_run(self, tmp_path):
        """Should pass --dry-run through to npm."""
        with patch("repack.registry.run") as mock_run:
            NpmRegistry().publish(tmp_path, dry_run=True)

        assert "--dry-run" in mock_run.call_args[0][0]

    def test_publish_failure_is_fatal(self, tmp_path):
        """Should raise PipelineError when npm publish fails."""
        with patch("repack.registry.run", side_effect=PipelineError("Command failed: npm publish")):
            with pytest.raises(PipelineError, match="Failed to publish package"):
                NpmRegistry().publish(tmp_path)
