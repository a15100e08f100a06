"""Test that project structure is correct and modules can be imported."""

import repack.config
import repack.models
import repack.package
import repack.pipeline
import repack.resolve_version
from repack.models import PackageResult, VersionTriple


def test_core_modules_importable():
    """Ensure core modules can be imported."""
    # This will fail if modules have syntax errors or missing dependencies

    assert hasattr(repack.models, "VersionTriple")
    assert hasattr(repack.models, "PackageResult")
    assert hasattr(repack.resolve_version, "resolve_next_version")
    assert hasattr(repack.package, "Packager")
    assert hasattr(repack.pipeline, "Pipeline")
    assert hasattr(repack.config, "BuildConfig")


def test_model_creation(tmp_path):
    """Test that basic models can be instantiated."""
    version = VersionTriple(323, 1, 2)
    assert str(version) == "323.1.2"

    result = PackageResult(output_dir=tmp_path, version=version, manifest={})
    assert result.complete
    assert result.compiled == []
