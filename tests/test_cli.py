"""Tests for the typer CLI."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from conftest import FakeCatalog
from logokit import cli
from logokit.core.cache import CacheStore
from logokit.core.catalog import Logo
from logokit.core.config import ProjectConfig, save_config

runner = CliRunner()


@pytest.fixture
def project(tmp_path):
    save_config(ProjectConfig(framework="react", typescript=True, output_dir="src/logos"), tmp_path)
    return tmp_path


@pytest.fixture
def catalog(monkeypatch):
    fake = FakeCatalog()
    fake.get_all_logos = lambda limit=None, store=True: fake.logos
    fake.search_logos = lambda query: [logo for logo in fake.logos if query.lower() in logo.title.lower()]
    fake.get_logos_by_category = lambda category: [logo for logo in fake.logos if category in logo.categories]
    fake.get_categories = lambda: []
    monkeypatch.setattr(cli, "build_catalog", lambda no_cache=False, use_cache=True: fake)
    return fake


def test_version():
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert "logokit" in result.output


def test_init_writes_detected_config(tmp_path):
    (tmp_path / "package.json").write_text(json.dumps({"dependencies": {"svelte": "^4"}}))
    result = runner.invoke(cli.app, ["--config", str(tmp_path), "init"])
    assert result.exit_code == 0, result.output
    saved = json.loads((tmp_path / "logos.config.json").read_text())
    assert saved["framework"] == "svelte"


def test_init_keeps_existing_config(project):
    before = (project / "logos.config.json").read_text()
    (project / "package.json").write_text(json.dumps({"dependencies": {"vue": "^3"}}))
    result = runner.invoke(cli.app, ["--config", str(project), "init"])
    assert result.exit_code == 0
    assert "already exists" in result.output
    assert (project / "logos.config.json").read_text() == before


def test_add_installs_components(project, catalog):
    result = runner.invoke(cli.app, ["--config", str(project), "add", "vercel", "github", "--silent"])
    assert result.exit_code == 0, result.output
    assert "Successfully installed 2 logos" in result.output
    assert (project / "src" / "logos" / "vercel.tsx").exists()
    assert (project / "src" / "logos" / "github.tsx").exists()


def test_add_dry_run(project, catalog):
    result = runner.invoke(cli.app, ["--config", str(project), "add", "vercel", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "would install" in result.output
    assert not (project / "src").exists()


def test_add_unknown_logo_exits_not_found(project, catalog):
    result = runner.invoke(cli.app, ["--config", str(project), "add", "vercel", "stirpe"])
    assert result.exit_code == 4
    assert not (project / "src").exists()


def test_add_partial_failure_exit_code(project, catalog):
    (project / "src" / "logos").mkdir(parents=True)
    (project / "src" / "logos" / "vercel.tsx").write_text("mine")
    result = runner.invoke(cli.app, ["--config", str(project), "add", "vercel", "github", "--silent"])
    assert result.exit_code == 5
    assert (project / "src" / "logos" / "github.tsx").exists()
    assert (project / "src" / "logos" / "vercel.tsx").read_text() == "mine"


def test_add_without_config(tmp_path, catalog):
    result = runner.invoke(cli.app, ["--config", str(tmp_path), "add", "vercel"])
    assert result.exit_code == 2


def test_add_rejects_unknown_strategy(project, catalog):
    result = runner.invoke(cli.app, ["--config", str(project), "add", "vercel", "--strategy", "threads"])
    assert result.exit_code != 0
    assert not (project / "src").exists()


def test_search_and_list(catalog):
    result = runner.invoke(cli.app, ["search", "git"])
    assert result.exit_code == 0
    assert "GitHub" in result.output

    result = runner.invoke(cli.app, ["list", "--category", "Database"])
    assert result.exit_code == 0
    assert "Supabase" in result.output

    result = runner.invoke(cli.app, ["list", "--limit", "2"])
    assert result.exit_code == 0
    assert "and 5 more logos" in result.output


def test_cache_stats_and_clear(monkeypatch, tmp_path):
    store = CacheStore(tmp_path / "cache")
    store.set("all-logos", [1, 2, 3])
    monkeypatch.setattr(cli, "CacheStore", lambda *a, **kw: store)

    result = runner.invoke(cli.app, ["cache", "--stats"])
    assert result.exit_code == 0
    assert "Entries: 1" in result.output

    result = runner.invoke(cli.app, ["cache", "--clear"])
    assert result.exit_code == 0
    assert store.stats().entries == 0


def test_settings_show_set_and_reset(user_settings):
    result = runner.invoke(cli.app, ["settings"])
    assert result.exit_code == 0
    assert "cache_ttl" in result.output

    result = runner.invoke(cli.app, ["settings", "concurrency", "9"])
    assert result.exit_code == 0, result.output
    assert user_settings.get("concurrency") == 9

    result = runner.invoke(cli.app, ["settings", "concurrency", "zero"])
    assert result.exit_code == 2
    assert user_settings.get("concurrency") == 9

    result = runner.invoke(cli.app, ["settings", "nope"])
    assert result.exit_code == 2

    result = runner.invoke(cli.app, ["settings", "--reset"])
    assert result.exit_code == 0
    assert user_settings.get("concurrency") == 5


def test_build_catalog_uses_settings(user_settings):
    user_settings.set("cache_ttl", 42)
    user_settings.set("api_base", "https://example.test/")
    catalog = cli.build_catalog()
    assert catalog.cache_ttl == 42
    assert catalog.base_url == "https://example.test"


def test_dry_run_lists_unnameable_logo(project, catalog):
    catalog.logos.append(Logo(id=8, title="微信", route="wechat"))
    result = runner.invoke(cli.app, ["--config", str(project), "add", "微信", "vercel", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "Cannot derive a file name" in result.output
    assert not (project / "src").exists()
