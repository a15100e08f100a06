"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from repack.config import BuildConfig


class FakeRegistry:
    """Registry returning canned versions and recording publishes."""

    def __init__(self, versions=None):
        self.versions = list(versions or [])
        self.queries: list[str] = []
        self.published: list[tuple[Path, bool]] = []

    def list_versions(self, package_name: str) -> list[str]:
        self.queries.append(package_name)
        return list(self.versions)

    def publish(self, package_dir: Path, *, dry_run: bool = False) -> None:
        self.published.append((package_dir, dry_run))


class FakeCompiler:
    """Compiler that writes a .js next to each source, failing for chosen names."""

    def __init__(self, fail: set[str] | None = None):
        self.fail = fail or set()
        self.calls: list[tuple[str, bool]] = []

    def compile(self, source: Path, out_dir: Path, *, jsx: bool = False) -> bool:
        self.calls.append((source.name, jsx))
        if source.name in self.fail:
            return False
        (out_dir / (source.stem + ".js")).write_text(f"// compiled {source.name}\n")
        return True


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def fake_compiler():
    return FakeCompiler()


@pytest.fixture
def build_tree(tmp_path):
    """A minimal upstream build output under tmp_path/build."""
    build = tmp_path / "build"
    lib = build / "pkg" / "lib"
    (lib / "patternfly").mkdir(parents=True)
    (lib / "hooks.ts").write_text("export const a: number = 1;\n")
    (lib / "utils.ts").write_text("export const b: number = 2;\n")
    (lib / "dialogs.tsx").write_text("export const D = () => <div/>;\n")
    (lib / "plain.js").write_text("export const c = 3;\n")
    (lib / "patternfly" / "patternfly-5-overrides.scss").write_text(".pf { color: red; }\n")

    runtime = build / "dist" / "base1"
    runtime.mkdir(parents=True)
    (runtime / "cockpit.js").write_text("const cockpit = {};")

    (build / "package.json").write_text(
        json.dumps({
            "name": "cockpit",
            "version": "9.9.9",
            "dependencies": {"react": "18.3.1", "@patternfly/react-core": "5.4.0"},
            "devDependencies": {"esbuild": "0.23.0"},
        })
    )
    return build


@pytest.fixture
def config(tmp_path):
    return BuildConfig(workdir=tmp_path)
