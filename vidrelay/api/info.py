from typing import Optional
from fastapi import APIRouter, Request, Depends, HTTPException, Query
from vidrelay.core.platform import detect_platform
from vidrelay.core.state import get_runtime
from vidrelay.core.logging import log_info, log_error
from vidrelay.infra.rate_limit import enforce_rate_limit
from vidrelay.models.response import MediaDescriptor
from vidrelay.services.info import MediaInfoService
from vidrelay.services.ytdlp import ExtractionError
from vidrelay.utils.locale import request_locale, safe_url_for_log
from vidrelay.i18n import i18n
import functools

router = APIRouter()

@router.get("/info", response_model=MediaDescriptor, dependencies=[Depends(enforce_rate_limit)])
async def get_video_info(
    request: Request,
    url: Optional[str] = Query(None, description="Video URL")
):
    """Get video metadata and the selectable formats"""
    
    locale = request_locale(request)
    _ = functools.partial(i18n.get, locale=locale)
    
    if not url:
        raise HTTPException(status_code=400, detail=_("error.missing_url"))
    
    platform = detect_platform(url)
    if platform is None:
        raise HTTPException(status_code=400, detail=_("error.unsupported_platform"))
    
    runtime = get_runtime(request)
    log_info(request, i18n.get(
        "log.fetching_info",
        url=safe_url_for_log(url, runtime.config.logging.level),
        platform=platform.value
    ))
    
    service = MediaInfoService(runtime.extractor)
    try:
        video_info = await service.fetch(url, platform)
    except ExtractionError as e:
        log_error(request, f"Info error: {e.message}")
        raise HTTPException(status_code=500, detail=_("error.info_failed", reason=e.message))
    except Exception as e:
        log_error(request, f"Video info error: {str(e)}")
        raise HTTPException(status_code=500, detail=_("error.info_failed", reason=str(e)))
    
    log_info(request, i18n.get("log.info_retrieved", title=video_info.title, count=len(video_info.formats)))
    return video_info
