"""
Share helpers - tweet intent, mailto and download file names for a report.
"""
import re
from datetime import datetime
from urllib.parse import quote

TWEET_MAX_CHARS = 280


def build_share_text(ticker: str, social_summary: str, display_markdown: str = "") -> str:
    """Prefer the AI's social blurb; otherwise the first paragraph of the report."""
    if social_summary.strip():
        return social_summary.strip()

    for block in re.split(r'\n\s*\n', display_markdown or ""):
        block = block.strip()
        if block and not block.startswith('#'):
            return f"{ticker}: {re.sub(r'[*_`]', '', block)}"
    return f"{ticker} technical analysis"


def truncate_for_tweet(text: str, limit: int = TWEET_MAX_CHARS) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit - 1].rstrip() + "…"


def build_tweet_url(text: str) -> str:
    return "https://twitter.com/intent/tweet?text=" + quote(truncate_for_tweet(text), safe='')


def build_mailto_url(subject: str, body: str, to: str = "") -> str:
    return f"mailto:{quote(to, safe='@')}?subject={quote(subject, safe='')}&body={quote(body, safe='')}"


def report_filename(ticker: str, extension: str, when: datetime = None) -> str:
    """e.g. 'BTCUSD_analysis_20261017.md'"""
    when = when or datetime.now()
    slug = re.sub(r'[^A-Za-z0-9]+', '_', ticker or 'report').strip('_') or 'report'
    return f"{slug}_analysis_{when.strftime('%Y%m%d')}.{extension.lstrip('.')}"
