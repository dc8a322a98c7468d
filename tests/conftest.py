"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Sequence

# Keep log files and the default cache out of the real home directory.
os.environ.setdefault("LOGOKIT_CACHE_DIR", tempfile.mkdtemp(prefix="logokit-tests-"))

import pytest

from logokit.core.cache import CacheStore
from logokit.core.catalog import Logo, Resolution, match_logo, suggest
from logokit.core import config as config_module
from logokit.core.config import Config, ProjectConfig
from logokit.core.errors import CatalogError

SVG = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<!-- Generator: Sketch -->\n"
    '<svg xmlns="http://www.w3.org/2000/svg" width="256" height="256" viewBox="0 0 256 256">\n'
    '  <path fill="#000" d="M0 0h256v256H0z"/>\n'
    "</svg>\n"
)

CATALOG = [
    {"id": 1, "title": "Vercel", "category": "Hosting", "route": "vercel", "url": "https://vercel.com"},
    {"id": 2, "title": "GitHub", "category": "Software",
     "route": {"light": "github_light", "dark": "github_dark"}, "url": "https://github.com"},
    {"id": 3, "title": "Next.js", "category": ["Framework", "Vercel"], "route": "nextjs", "url": ""},
    {"id": 4, "title": "Supabase", "category": "Database", "route": "supabase", "url": ""},
    {"id": 5, "title": "Stripe", "category": "Payment", "route": "stripe", "url": ""},
    {"id": 6, "title": "Docker", "category": "Devops", "route": "docker", "url": ""},
    {"id": 7, "title": "Figma", "category": "Design", "route": "figma", "url": ""},
]


class FakeCatalog:
    """In-memory catalog; ``fetch_svg`` runs in a worker thread like the real one."""

    def __init__(
        self,
        logos: Sequence[dict] = CATALOG,
        delay: float = 0.0,
        failing: Sequence[str] = (),
        bodies: dict[str, str] | None = None,
        cache: CacheStore | None = None,
    ) -> None:
        self.logos = [Logo.from_json(r) for r in logos]
        self.delay = delay
        self.failing = set(failing)
        self.bodies = bodies or {}
        self.cache = cache
        self.fetched: list[str] = []
        self.resolve_calls: list[tuple[list[str], bool]] = []
        self._lock = threading.Lock()

    def resolve(self, names: Sequence[str], store: bool = True) -> Resolution:
        self.resolve_calls.append((list(names), store))
        if self.cache is not None and store:
            self.cache.set("all-logos", [logo.title for logo in self.logos])
        result = Resolution()
        for name in names:
            logo = match_logo(name, self.logos)
            if logo is None:
                result.not_found.append(name)
                result.suggestions[name] = suggest(name, [logo.title for logo in self.logos])
            else:
                result.found.append(logo)
        return result

    def fetch_svg(self, route: str) -> str:
        with self._lock:
            self.fetched.append(route)
        if self.delay:
            time.sleep(self.delay)
        if route in self.failing:
            raise CatalogError(f"HTTP 500: boom ({route})", url=route, status_code=500)
        return self.bodies.get(route, SVG)


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def svg_config() -> ProjectConfig:
    config = ProjectConfig(framework="raw", typescript=False, output_dir="logos", format="svg")
    return config


@pytest.fixture
def react_config() -> ProjectConfig:
    return ProjectConfig(framework="react", typescript=True, output_dir="src/logos", format="component")


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def store(cache_dir: Path) -> CacheStore:
    return CacheStore(cache_dir)


@pytest.fixture(autouse=True)
def user_settings(tmp_path_factory, monkeypatch) -> Config:
    """Fresh ``Config`` singleton backed by a throwaway settings.json."""
    config_dir = tmp_path_factory.mktemp("settings")
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "SETTINGS_FILE", config_dir / "settings.json")
    monkeypatch.setattr(Config, "_instance", None)
    return Config()
