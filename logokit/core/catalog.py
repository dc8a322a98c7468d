"""svgl catalog client: lists, searches and fetches logos from api.svgl.app.

List endpoints are cached through ``CacheStore`` for an hour; search
results and raw SVG bodies are always fetched fresh.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Sequence
from urllib.parse import quote

import requests

from logokit import __version__
from logokit.core.cache import CacheStore
from logokit.core.errors import CatalogError
from logokit.core.logger import get_logger

_log = get_logger("catalog")

SVGL_API_BASE = "https://api.svgl.app"
CACHE_TTL = 3600  # 1 hour
REQUEST_TIMEOUT = 15

_NON_ALNUM = re.compile(r"[^a-z0-9]")


@dataclass
class Logo:
    """One catalog entry."""
    id: int = 0
    title: str = ""
    category: str | list[str] = ""
    route: str | dict[str, str] = ""
    url: str = ""
    wordmark: str | dict[str, str] | None = None
    brand_url: str | None = None

    @classmethod
    def from_json(cls, r: dict[str, Any]) -> "Logo":
        return cls(
            id=r.get("id", 0),
            title=r.get("title", ""),
            category=r.get("category", ""),
            route=r.get("route", ""),
            url=r.get("url", "") or "",
            wordmark=r.get("wordmark"),
            brand_url=r.get("brandUrl"),
        )

    @property
    def has_variants(self) -> bool:
        return isinstance(self.route, dict)

    @property
    def categories(self) -> list[str]:
        if isinstance(self.category, list):
            return list(self.category)
        return [self.category] if self.category else []

    def route_for(self, theme: str = "light") -> str:
        if isinstance(self.route, dict):
            return self.route.get(theme) or self.route.get("light", "")
        return self.route


@dataclass
class Category:
    category: str = ""
    total: int = 0


@dataclass
class Resolution:
    found: list[Logo] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    suggestions: dict[str, list[str]] = field(default_factory=dict)


class CatalogClient:
    """Thin client over the svgl REST API."""

    def __init__(
        self,
        base_url: str = SVGL_API_BASE,
        cache: CacheStore | None = None,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        cache_ttl: float = CACHE_TTL,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else CacheStore()
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", f"logokit/{__version__}")

    # ── HTTP ──

    def _get(self, url: str) -> requests.Response:
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise CatalogError(f"Network error for {url}: {e}", url=url) from e
        if resp.status_code != 200:
            raise CatalogError(
                f"HTTP {resp.status_code}: {resp.reason}", url=url, status_code=resp.status_code
            )
        return resp

    def _fetch_json(self, url: str) -> Any:
        resp = self._get(url)
        try:
            return resp.json()
        except ValueError as e:
            raise CatalogError(f"Invalid JSON from {url}", url=url) from e

    def _cached_json(self, key: str, url: str, store: bool = True) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            _log.debug("Catalog: cache hit %s", key)
            return cached
        data = self._fetch_json(url)
        if store:
            self.cache.set(key, data, self.cache_ttl)
        return data

    # ── Listing ──

    def get_all_logos(self, limit: int | None = None, store: bool = True) -> list[Logo]:
        key = f"all-logos-{limit}" if limit else "all-logos"
        url = f"{self.base_url}?limit={limit}" if limit else self.base_url
        return [Logo.from_json(r) for r in self._cached_json(key, url, store)]

    def get_logos_by_category(self, category: str) -> list[Logo]:
        url = f"{self.base_url}/category/{quote(category, safe='')}"
        return [Logo.from_json(r) for r in self._cached_json(f"category-{category}", url)]

    def get_categories(self) -> list[Category]:
        data = self._cached_json("categories", f"{self.base_url}/categories")
        return [Category(category=c.get("category", ""), total=c.get("total", 0)) for c in data]

    def search_logos(self, query: str) -> list[Logo]:
        url = f"{self.base_url}?search={quote(query, safe='')}"
        return [Logo.from_json(r) for r in self._fetch_json(url)]

    # ── Content ──

    def fetch_svg(self, route: str) -> str:
        """Fetch the raw SVG body for a logo route."""
        if route.startswith("http"):
            url = route
        else:
            url = f"{self.base_url}/svg/{route}.svg"
        return self._get(url).text

    # ── Resolution ──

    def resolve(self, names: Sequence[str], store: bool = True) -> Resolution:
        """Map requested names to catalog logos.

        Each name tries, in order: case-insensitive exact title, title with
        non-alphanumerics stripped, then substring of the title.  With
        ``store=False`` a catalog fetch is not written back to the cache.
        """
        logos = self.get_all_logos(store=store)
        result = Resolution()
        for name in names:
            logo = match_logo(name, logos)
            if logo is None:
                result.not_found.append(name)
                result.suggestions[name] = suggest(name, [entry.title for entry in logos])
            else:
                result.found.append(logo)
        _log.info("Catalog: resolved %d of %d names", len(result.found), len(names))
        return result


def match_logo(name: str, logos: Sequence[Logo]) -> Logo | None:
    lower = name.strip().lower()
    if not lower:
        return None
    for logo in logos:
        if logo.title.lower() == lower:
            return logo
    clean = _NON_ALNUM.sub("", lower)
    if clean:
        for logo in logos:
            if _NON_ALNUM.sub("", logo.title.lower()) == clean:
                return logo
    for logo in logos:
        if lower in logo.title.lower():
            return logo
    return None


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def suggest(name: str, titles: Sequence[str], max_distance: int = 3, limit: int = 5) -> list[str]:
    """Titles within ``max_distance`` edits of ``name``, closest first."""
    target = name.lower()
    scored = [(levenshtein(target, t.lower()), t) for t in titles]
    close = sorted((s for s in scored if s[0] <= max_distance), key=lambda s: s[0])
    return [t for _, t in close[:limit]]
