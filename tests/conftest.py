import os
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vidrelay.config.settings import Config, DownloadConfig, LoggingConfig
from vidrelay.infra.rate_limit import InMemoryRateLimiter
from vidrelay.main import create_app
from vidrelay.services.ytdlp import ExtractionError


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExtractor:
    """Stands in for YtDlpClient; records every call"""

    def __init__(
        self,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[ExtractionError] = None,
        download_error: Optional[ExtractionError] = None,
        payload: bytes = b"\x00\x00\x00\x18ftypmp42fake-video",
        write_partial: bool = False,
    ):
        self.metadata = metadata if metadata is not None else {"id": "abc", "title": "Sample"}
        self.error = error
        self.download_error = download_error
        self.payload = payload
        self.write_partial = write_partial
        self.calls: List[Tuple[str, ...]] = []

    async def fetch_metadata(self, url: str) -> Dict[str, Any]:
        self.calls.append(("info", url))
        if self.error:
            raise self.error
        return self.metadata

    async def fetch_title_metadata(self, url: str) -> Dict[str, Any]:
        self.calls.append(("title", url))
        if self.error:
            raise self.error
        return self.metadata

    async def download(self, url: str, format_str: str, output_path: str) -> None:
        self.calls.append(("download", url, format_str, output_path))
        if self.write_partial:
            with open(output_path + ".part", "wb") as f:
                f.write(self.payload[:4])
        if self.download_error:
            raise self.download_error
        with open(output_path, "wb") as f:
            f.write(self.payload)


@pytest.fixture
def download_dir(tmp_path):
    path = tmp_path / "downloads"
    path.mkdir()
    return str(path)


@pytest.fixture
def cfg(download_dir):
    return Config(
        download=DownloadConfig(directory=download_dir, chunk_size=8),
        logging=LoggingConfig(enable_rich=False),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def app(cfg, extractor, clock):
    limiter = InMemoryRateLimiter.from_config(cfg.rate_limit, clock=clock)
    return create_app(cfg, extractor=extractor, rate_limiter=limiter)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
