from dataclasses import dataclass
from fastapi import Request
from vidrelay.config.settings import Config
from vidrelay.infra.rate_limit import InMemoryRateLimiter
from vidrelay.services.ytdlp import YtDlpClient

@dataclass
class RuntimeState:
    """Per-application collaborators, attached to app.state.runtime"""
    config: Config
    extractor: YtDlpClient
    rate_limiter: InMemoryRateLimiter

def get_runtime(request: Request) -> RuntimeState:
    return request.app.state.runtime
