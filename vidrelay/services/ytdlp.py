from typing import Any, Dict, List, Optional, NamedTuple
import asyncio
import json
from vidrelay.config.settings import Config, config as default_config

STDERR_MAX_CHARS = 500

class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes

class ExtractionError(Exception):
    """yt-dlp exited unsuccessfully or produced unusable output"""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.returncode = returncode

class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: Optional[float] = None,
        capture_stderr: bool = True
    ) -> CompletedProcess:
        """
        Run subprocess with an optional timeout and proper cleanup.
        Prevents process leaks when the caller goes away.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE if capture_stderr else asyncio.subprocess.DEVNULL,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )

            return CompletedProcess(
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr if capture_stderr else b""
            )

        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    def __init__(self, cfg: Config):
        self.binary = cfg.ytdlp.binary
        self.headers = list(cfg.ytdlp.headers)

    def _header_args(self) -> List[str]:
        args = []
        for header in self.headers:
            args.extend(['--add-header', header])
        return args

    def build_info_command(self, url: str) -> List[str]:
        """Build command for fetching full metadata with compatibility flags"""
        cmd = [
            self.binary,
            '--dump-single-json',
            '--no-check-certificates',
            '--prefer-free-formats',
            '--no-warnings',
        ]
        cmd.extend(self._header_args())
        cmd.append(url)
        return cmd

    def build_title_command(self, url: str) -> List[str]:
        """Build command for the metadata lookup that names a download"""
        return [
            self.binary,
            '--dump-single-json',
            '--no-check-certificates',
            '--no-warnings',
            url
        ]

    def build_download_command(self, url: str, format_str: str, output_path: str) -> List[str]:
        """Build command that writes the selected rendition to output_path"""
        cmd = [
            self.binary,
            '-o', output_path,
            '-f', format_str,
            '--no-check-certificates',
            '--prefer-free-formats',
            '--no-playlist',
            '--no-progress',
        ]
        cmd.extend(self._header_args())
        cmd.append(url)
        return cmd

def _error_message(result: CompletedProcess) -> str:
    message = result.stderr.decode(errors="replace").strip()
    if not message:
        message = f"yt-dlp exited with code {result.returncode}"
    return message[-STDERR_MAX_CHARS:]

class YtDlpClient:
    """Async gateway to the yt-dlp command line tool"""

    def __init__(self, cfg: Optional[Config] = None):
        cfg = cfg or default_config
        self.commands = YTDLPCommandBuilder(cfg)
        self.timeout = cfg.download.timeout_seconds

    async def _run(self, cmd: List[str]) -> CompletedProcess:
        try:
            result = await SubprocessExecutor.run(cmd, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ExtractionError(f"yt-dlp timed out after {self.timeout} seconds")
        except OSError as e:
            raise ExtractionError(f"Could not run {cmd[0]}: {e}")

        if result.returncode != 0:
            raise ExtractionError(_error_message(result), result.returncode)
        return result

    async def _run_json(self, cmd: List[str]) -> Dict[str, Any]:
        result = await self._run(cmd)
        try:
            info = json.loads(result.stdout.decode())
        except ValueError:
            raise ExtractionError("yt-dlp returned malformed metadata")
        if not isinstance(info, dict):
            raise ExtractionError("yt-dlp returned malformed metadata")
        return info

    async def fetch_metadata(self, url: str) -> Dict[str, Any]:
        """Metadata-only call with the full compatibility flag set"""
        return await self._run_json(self.commands.build_info_command(url))

    async def fetch_title_metadata(self, url: str) -> Dict[str, Any]:
        """Lighter metadata call used to name a download"""
        return await self._run_json(self.commands.build_title_command(url))

    async def download(self, url: str, format_str: str, output_path: str) -> None:
        """Materialize the selected rendition at output_path"""
        await self._run(self.commands.build_download_command(url, format_str, output_path))
