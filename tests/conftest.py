"""Shared test fixtures for cv.

Provides an in-memory ExtensionServices fake, on-disk site fixtures
(extension directory + SQLite registry), and an httpx mock feed.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import httpx
import pytest

from cv.exceptions import ExtensionNotFoundError, FeedError
from cv.models.config import SiteConfig
from cv.models.extension import ExtensionInfo
from cv.storage.engine import create_session_factory, create_site_engine
from cv.storage.schema import Base, ExtensionRecord

FEED_URL = "https://feed.example.org/extdir/ver=5.0|cms=Standalone"


class FakeServices:
    """ExtensionServices backed by plain Python data, counting every call."""

    def __init__(
        self,
        *,
        catalog: list[ExtensionInfo] | None = None,
        local: dict[str, ExtensionInfo] | None = None,
        statuses: dict[str, str] | None = None,
        repository_url: str = FEED_URL,
        catalog_error: Exception | None = None,
        refresh_error: Exception | None = None,
    ) -> None:
        self.catalog = list(catalog or [])
        self.local = dict(local or {})
        self.statuses = dict(statuses or {})
        self._repository_url = repository_url
        self.catalog_error = catalog_error
        self.refresh_error = refresh_error
        self.calls: Counter[str] = Counter()
        self.refresh_args: list[tuple[bool, bool]] = []
        self.closed = False

    @property
    def repository_url(self) -> str:
        return self._repository_url

    def fetch_catalog(self) -> list[ExtensionInfo]:
        self.calls["fetch_catalog"] += 1
        if self.catalog_error is not None:
            raise self.catalog_error
        return list(self.catalog)

    def list_local_keys(self) -> list[str]:
        self.calls["list_local_keys"] += 1
        return list(self.local)

    def get_statuses(self) -> dict[str, str]:
        self.calls["get_statuses"] += 1
        return dict(self.statuses)

    def resolve_metadata(self, key: str) -> ExtensionInfo:
        self.calls["resolve_metadata"] += 1
        try:
            return self.local[key]
        except KeyError:
            raise ExtensionNotFoundError(key) from None

    def refresh(self, *, local: bool = True, remote: bool = True) -> None:
        self.calls["refresh"] += 1
        self.refresh_args.append((local, remote))
        if self.refresh_error is not None:
            raise self.refresh_error

    def close(self) -> None:
        self.closed = True

    @property
    def listing_calls(self) -> int:
        return sum(
            self.calls[name]
            for name in ("fetch_catalog", "list_local_keys", "get_statuses", "resolve_metadata")
        )


@pytest.fixture
def scenario_services() -> FakeServices:
    """One remote extension and one installed local extension."""
    return FakeServices(
        catalog=[ExtensionInfo(key="org.civicrm.foo", file="foo.xml", version="1.0")],
        local={"bar": ExtensionInfo(key="bar", file="bar.xml", version="2.0")},
        statuses={"bar": "installed"},
    )


@pytest.fixture
def four_row_services() -> FakeServices:
    """Two remote and two local extensions with interleaved names."""
    return FakeServices(
        catalog=[
            ExtensionInfo(key="org.example.zeta", file="alpha", version="1.0"),
            ExtensionInfo(key="org.example.beta", file="beta", version="1.1"),
        ],
        local={
            "org.example.local2": ExtensionInfo(key="org.example.local2", file="beta", version="2.0"),
            "org.example.local1": ExtensionInfo(key="org.example.local1", file="beta", version="2.1"),
        },
        statuses={"org.example.local1": "installed", "org.example.local2": "disabled"},
    )


@pytest.fixture
def make_services():
    """Factory for FakeServices with custom data."""
    return FakeServices


@pytest.fixture
def feed_error() -> FeedError:
    return FeedError(FEED_URL + "/single", "HTTP 503")


# ---------------------------------------------------------------------------
# On-disk site fixtures
# ---------------------------------------------------------------------------


def info_xml(key: str, file: str, version: str = "1.0", *, label: str = "", stage: str = "stable") -> str:
    return (
        f'<?xml version="1.0"?>\n'
        f'<extension key="{key}" type="module">\n'
        f"  <file>{file}</file>\n"
        f"  <name>{label or file.title()}</name>\n"
        f"  <description>The {file} extension</description>\n"
        f"  <version>{version}</version>\n"
        f"  <develStage>{stage}</develStage>\n"
        f"  <compatibility><ver>5.0</ver></compatibility>\n"
        f"</extension>\n"
    )


@pytest.fixture
def write_extension():
    """Write an extension directory holding an info.xml; returns its path."""

    def _write(ext_dir: Path, key: str, file: str, version: str = "1.0") -> Path:
        path = ext_dir / file
        path.mkdir(parents=True, exist_ok=True)
        (path / "info.xml").write_text(info_xml(key, file, version))
        return path

    return _write


@pytest.fixture
def site(tmp_path: Path, write_extension) -> SiteConfig:
    """A site with two local extensions; only one is recorded as installed."""
    root = tmp_path / "site"
    ext_dir = root / "ext"
    write_extension(ext_dir, "org.example.mail", "mail", "1.2")
    write_extension(ext_dir, "org.example.reports", "reports", "0.9")

    config = SiteConfig(root=root)
    engine = create_site_engine(config.resolved_db_url)
    Base.metadata.create_all(engine)
    with create_session_factory(engine)() as session:
        session.add(ExtensionRecord(full_name="org.example.mail", name="mail", file="mail", is_active=True))
        session.add(ExtensionRecord(full_name="org.example.gone", name="gone", file="gone", is_active=False))
        session.commit()
    engine.dispose()
    return config


def feed_payload() -> dict[str, str]:
    return {
        "org.example.mail": info_xml("org.example.mail", "mail", "1.3"),
        "org.example.donate": info_xml("org.example.donate", "donate", "4.0"),
    }


@pytest.fixture
def feed_client():
    """httpx client answering feed requests from a dict of path -> response."""

    def _client(payload=None, *, status_code: int = 200, seen: list[str] | None = None) -> httpx.Client:
        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append(str(request.url))
            if status_code != 200:
                return httpx.Response(status_code)
            body = feed_payload() if payload is None else payload
            if isinstance(body, (str, bytes)):
                return httpx.Response(200, content=body)
            return httpx.Response(200, json=body)

        return httpx.Client(transport=httpx.MockTransport(handler))

    return _client
