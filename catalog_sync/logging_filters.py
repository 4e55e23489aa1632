# --- Global log sanitizers ------------------------------------------------------
# Magento answers failures with full HTML error pages and both platforms put
# credentials in headers; keep both out of the logs.
import logging
import re

_HTML_SIG_RE = re.compile(r'(?is)<!DOCTYPE html|<html[^>]*>')
_TITLE_RE    = re.compile(r'(?is)<title[^>]*>(.*?)</title>')
_TAG_RE      = re.compile(r'(?is)<[^>]+>')
_SCRIPT_RE   = re.compile(r'(?is)<(script|style)[^>]*>.*?</\1>')
_BEARER_RE   = re.compile(r'(?i)(bearer\s+)[A-Za-z0-9._\-]+')
_SHOPIFY_RE  = re.compile(r'(?i)(x-shopify-access-token["\']?\s*[:=]\s*["\']?)[A-Za-z0-9_\-]+')


def _strip_tags(s: str) -> str:
    s = _SCRIPT_RE.sub('', s)
    s = _TAG_RE.sub(' ', s)
    return re.sub(r'\s+', ' ', s).strip()


def summarize_html(s: str, limit: int = 200) -> str:
    title = None
    m = _TITLE_RE.search(s)
    if m:
        title = _strip_tags(m.group(1))
    preview = title or _strip_tags(s)[:limit]
    return f"{preview} [HTML {len(s)} chars trimmed]"


def redact_tokens(s: str) -> str:
    s = _BEARER_RE.sub(r'\1<redacted>', s)
    return _SHOPIFY_RE.sub(r'\1<redacted>', s)


class HtmlTrimFilter(logging.Filter):
    """If a log message contains a large HTML blob, replace it with a short summary."""
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        if isinstance(msg, str) and len(msg) > 200 and _HTML_SIG_RE.search(msg):
            record.msg = summarize_html(msg)
            record.args = ()
        return True


class TokenRedactFilter(logging.Filter):
    """Mask bearer tokens and Shopify access tokens."""
    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        if isinstance(msg, str):
            cleaned = redact_tokens(msg)
            if cleaned != msg:
                record.msg = cleaned
                record.args = ()
        return True


_INSTALLED = False


def install_log_filters(names=("", "uvicorn", "uvicorn.error")) -> None:
    """Install once on common loggers (root + uvicorn family)."""
    global _INSTALLED
    if _INSTALLED:
        return
    for name in names:
        lg = logging.getLogger(name)
        lg.addFilter(HtmlTrimFilter())
        lg.addFilter(TokenRedactFilter())
    _INSTALLED = True
