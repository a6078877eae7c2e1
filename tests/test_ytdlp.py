import asyncio
import json

import pytest

from vidrelay.config.settings import Config, DownloadConfig, YtDlpConfig
from vidrelay.services import ytdlp
from vidrelay.services.ytdlp import CompletedProcess, ExtractionError, YTDLPCommandBuilder, YtDlpClient

URL = "https://www.youtube.com/watch?v=abc"


def test_info_command_carries_compatibility_flags():
    cmd = YTDLPCommandBuilder(Config()).build_info_command(URL)

    assert cmd[0] == "yt-dlp"
    assert cmd[-1] == URL
    for flag in ("--dump-single-json", "--no-check-certificates", "--prefer-free-formats", "--no-warnings"):
        assert flag in cmd
    assert cmd.count("--add-header") == 2
    assert "referer:youtube.com" in cmd
    assert "user-agent:googlebot" in cmd


def test_title_command_is_plain_metadata_lookup():
    cmd = YTDLPCommandBuilder(Config()).build_title_command(URL)

    assert cmd == ["yt-dlp", "--dump-single-json", "--no-check-certificates", "--no-warnings", URL]


def test_download_command_targets_output_path():
    cfg = Config(ytdlp=YtDlpConfig(binary="/opt/yt-dlp", headers=["referer:example.com"]))
    cmd = YTDLPCommandBuilder(cfg).build_download_command(URL, "22", "/tmp/downloads/f.mp4")

    assert cmd[0] == "/opt/yt-dlp"
    assert cmd[cmd.index("-o") + 1] == "/tmp/downloads/f.mp4"
    assert cmd[cmd.index("-f") + 1] == "22"
    assert cmd[cmd.index("--add-header") + 1] == "referer:example.com"
    assert "--dump-single-json" not in cmd
    assert cmd[-1] == URL


def fake_run(result=None, exc=None, seen=None):
    async def run(cmd, timeout=None, capture_stderr=True):
        if seen is not None:
            seen.append((cmd, timeout))
        if exc:
            raise exc
        return result
    return run


@pytest.mark.asyncio
async def test_fetch_metadata_parses_json(monkeypatch):
    seen = []
    payload = {"id": "abc", "title": "t"}
    monkeypatch.setattr(
        ytdlp.SubprocessExecutor, "run",
        fake_run(CompletedProcess(0, json.dumps(payload).encode(), b""), seen=seen)
    )

    info = await YtDlpClient(Config()).fetch_metadata(URL)

    assert info == payload
    assert seen[0][0][-1] == URL
    assert seen[0][1] is None


@pytest.mark.asyncio
async def test_timeout_is_forwarded(monkeypatch):
    seen = []
    monkeypatch.setattr(ytdlp.SubprocessExecutor, "run", fake_run(CompletedProcess(0, b"{}", b""), seen=seen))

    await YtDlpClient(Config(download=DownloadConfig(timeout_seconds=30))).fetch_title_metadata(URL)

    assert seen[0][1] == 30


@pytest.mark.asyncio
async def test_nonzero_exit_raises_with_stderr(monkeypatch):
    stderr = b"WARNING: something\nERROR: [youtube] abc: Video unavailable\n"
    monkeypatch.setattr(ytdlp.SubprocessExecutor, "run", fake_run(CompletedProcess(1, b"", stderr)))

    with pytest.raises(ExtractionError) as excinfo:
        await YtDlpClient(Config()).download(URL, "best", "/tmp/x.mp4")

    assert excinfo.value.returncode == 1
    assert "Video unavailable" in excinfo.value.message


@pytest.mark.asyncio
async def test_nonzero_exit_without_stderr(monkeypatch):
    monkeypatch.setattr(ytdlp.SubprocessExecutor, "run", fake_run(CompletedProcess(2, b"", b"")))

    with pytest.raises(ExtractionError, match="exited with code 2"):
        await YtDlpClient(Config()).fetch_metadata(URL)


@pytest.mark.asyncio
@pytest.mark.parametrize("stdout", [b"not json", b"[1, 2]"])
async def test_malformed_metadata(monkeypatch, stdout):
    monkeypatch.setattr(ytdlp.SubprocessExecutor, "run", fake_run(CompletedProcess(0, stdout, b"")))

    with pytest.raises(ExtractionError, match="malformed"):
        await YtDlpClient(Config()).fetch_metadata(URL)


@pytest.mark.asyncio
async def test_missing_binary(monkeypatch):
    monkeypatch.setattr(ytdlp.SubprocessExecutor, "run", fake_run(exc=FileNotFoundError("yt-dlp")))

    with pytest.raises(ExtractionError, match="Could not run yt-dlp"):
        await YtDlpClient(Config()).fetch_metadata(URL)


@pytest.mark.asyncio
async def test_timeout_becomes_extraction_error(monkeypatch):
    monkeypatch.setattr(ytdlp.SubprocessExecutor, "run", fake_run(exc=asyncio.TimeoutError()))

    with pytest.raises(ExtractionError, match="timed out"):
        await YtDlpClient(Config(download=DownloadConfig(timeout_seconds=5))).fetch_metadata(URL)
