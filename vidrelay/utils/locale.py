from typing import Optional
from urllib.parse import urlparse
from fastapi import Request
from vidrelay.config.settings import I18nConfig

def get_locale(accept_language: Optional[str], i18n_config: I18nConfig) -> str:
    """Extract locale from Accept-Language header"""
    if not accept_language:
        return i18n_config.default_locale

    languages = []
    for lang in accept_language.split(","):
        parts = lang.strip().split(";")
        locale = parts[0].split("-")[0]
        languages.append(locale)

    for locale in languages:
        if locale in i18n_config.supported_locales:
            return locale

    return i18n_config.default_locale

def request_locale(request: Request) -> str:
    """Locale for a request, using the settings of the app serving it"""
    return get_locale(
        request.headers.get("accept-language"),
        request.app.state.runtime.config.i18n
    )

def safe_url_for_log(url: str, log_level: str = "INFO") -> str:
    """Safe URL for logging"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "invalid_url"

    base_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    if log_level == "DEBUG" and parsed.query:
        return f"{base_url}?..."
    return base_url
