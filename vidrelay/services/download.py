import os
import secrets
from typing import Optional
from vidrelay.config.settings import Config
from vidrelay.infra.storage import ensure_download_dir, find_outputs, remove_quietly
from vidrelay.models.internal import DownloadedFile, DownloadIntent
from vidrelay.services.ytdlp import ExtractionError, YtDlpClient
from vidrelay.utils.filename import attachment_filename

UNAVAILABLE_PATTERNS = (
    ("video unavailable", "error.video_unavailable"),
    ("this video is not available", "error.video_not_available"),
)

def classify_download_error(message: str) -> Optional[str]:
    """
    Map yt-dlp error text to a caller-side message key.
    Returns None when the failure is not a known unavailable-video condition.
    """
    lowered = (message or "").lower()
    for pattern, key in UNAVAILABLE_PATTERNS:
        if pattern in lowered:
            return key
    return None

class DownloadService:
    """Materialize a rendition into the scratch directory"""

    def __init__(self, extractor: YtDlpClient, cfg: Config):
        self.extractor = extractor
        self.directory = cfg.download.directory

    async def prepare(self, intent: DownloadIntent) -> DownloadedFile:
        """
        Look up the title, then download to a uniquely named file.
        On failure no file carrying this request's prefix is left behind.
        """
        info = await self.extractor.fetch_title_metadata(intent.url)
        filename = attachment_filename(
            info.get("title"),
            fallback=f"{intent.platform.value}_video"
        )

        ensure_download_dir(self.directory)
        file_id = secrets.token_hex(8)
        output_path = os.path.join(self.directory, f"{file_id}.mp4")

        try:
            await self.extractor.download(intent.url, intent.format_id, output_path)
            # yt-dlp may settle on another extension after merging
            outputs = find_outputs(self.directory, file_id)
            if not outputs:
                raise ExtractionError("Output file not found after download")
            path = output_path if output_path in outputs else outputs[0]
            size = os.path.getsize(path)
        except BaseException:
            for leftover in find_outputs(self.directory, file_id):
                remove_quietly(leftover)
            raise

        for extra in find_outputs(self.directory, file_id):
            if extra != path:
                remove_quietly(extra)

        return DownloadedFile(path=path, filename=filename, size=size)
