import aiofiles
from typing import Any, AsyncIterator, Optional
from fastapi import APIRouter, Request, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send
from vidrelay.core.platform import detect_platform
from vidrelay.core.state import get_runtime
from vidrelay.core.logging import log_info, log_error
from vidrelay.infra.rate_limit import enforce_rate_limit
from vidrelay.infra.storage import remove_quietly
from vidrelay.models.internal import DownloadedFile, DownloadIntent
from vidrelay.services.download import DownloadService, classify_download_error
from vidrelay.services.ytdlp import ExtractionError
from vidrelay.utils.locale import request_locale, safe_url_for_log
from vidrelay.i18n import i18n
import functools

MEDIA_TYPE = "video/mp4"

router = APIRouter()

class DownloadRelayResponse(StreamingResponse):
    """
    Streams a downloaded file and deletes it once the response is over,
    whether it completed, failed or the client went away.
    """

    def __init__(self, handle: Any, downloaded: DownloadedFile, chunk_size: int, request: Request):
        self.handle = handle
        self.path = downloaded.path
        self.chunk_size = chunk_size
        self.request = request
        self._cleaned = False
        headers = {
            'Content-Disposition': f'attachment; filename="{downloaded.filename}"',
            'Content-Length': str(downloaded.size),
            'X-Content-Type-Options': 'nosniff',
            'Cache-Control': 'no-cache',
        }
        super().__init__(self._iter_file(), media_type=MEDIA_TYPE, headers=headers)

    async def _iter_file(self) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await self.handle.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk
        except Exception as e:
            # Headers are already out; the status can no longer change
            log_error(self.request, f"Stream error: {str(e)}")
            raise
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        if self._cleaned:
            return
        self._cleaned = True
        try:
            await self.handle.close()
        except OSError as e:
            log_error(self.request, f"Error closing {self.path}: {str(e)}")
        finally:
            # close() may be cancelled on client disconnect
            if remove_quietly(self.path):
                log_info(self.request, i18n.get("log.cleaned_up", path=self.path))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.cleanup()

@router.get("/download", dependencies=[Depends(enforce_rate_limit)])
async def download_video(
    request: Request,
    url: Optional[str] = Query(None, description="Video URL"),
    format_id: Optional[str] = Query(None, alias="format", description="yt-dlp format selector")
):
    """Download a rendition and relay it as an attachment"""

    locale = request_locale(request)
    _ = functools.partial(i18n.get, locale=locale)

    if not url:
        raise HTTPException(status_code=400, detail=_("error.missing_url"))

    platform = detect_platform(url)
    if platform is None:
        raise HTTPException(status_code=400, detail=_("error.unsupported_platform"))

    runtime = get_runtime(request)
    intent = DownloadIntent(
        url=url,
        platform=platform,
        format_id=format_id or runtime.config.download.default_format
    )
    log_info(request, i18n.get("log.starting_download", url=safe_url_for_log(url, runtime.config.logging.level), format=intent.format_id))

    service = DownloadService(runtime.extractor, runtime.config)
    try:
        downloaded = await service.prepare(intent)
    except ExtractionError as e:
        log_error(request, f"Download error: {e.message}")
        key = classify_download_error(e.message)
        if key:
            raise HTTPException(status_code=400, detail=_(key))
        raise HTTPException(status_code=500, detail=_("error.download_failed", reason=e.message))
    except Exception as e:
        log_error(request, f"Download error: {str(e)}")
        raise HTTPException(status_code=500, detail=_("error.download_failed", reason=str(e)))

    try:
        handle = await aiofiles.open(downloaded.path, 'rb')
    except OSError as e:
        log_error(request, f"Stream error: {str(e)}")
        remove_quietly(downloaded.path)
        raise HTTPException(status_code=500, detail=_("error.stream_failed"))

    log_info(request, i18n.get(
        "log.streaming",
        filename=downloaded.filename,
        size=downloaded.size / 1024 / 1024
    ))

    return DownloadRelayResponse(
        handle,
        downloaded,
        runtime.config.download.chunk_size,
        request
    )
