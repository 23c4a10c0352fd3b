"""
Report post-processing for the AI analysis markdown.
- Pulls the trailing "Social Media Summary" section out of the report
- Pulls the "AI Conviction Score: X/10 (reason)" line out of the report
- Never raises: anything it cannot find is simply left in place
"""
import re
from dataclasses import dataclass


@dataclass
class ProcessedReport:
    display_markdown: str
    social_summary: str = ""
    confidence_score: float = 0.0
    conviction_reason: str = ""


# Heading line (optionally bold, optional trailing colon), then the rest of the text
SOCIAL_SUMMARY_RE = re.compile(
    r'^[ \t]*(?:#{1,6}[ \t]*)?(?:\*\*|__)?[ \t]*(?:\d+\.[ \t]*)?'
    r'Social[ \t]+Media[ \t]+Summary[ \t]*:?[ \t]*(?:\*\*|__)?[ \t]*:?[ \t]*$',
    re.IGNORECASE | re.MULTILINE,
)

# **AI Conviction Score:** 7.5/10 (Strong Confluence)
CONVICTION_RE = re.compile(
    r'^[ \t]*(?:[-*][ \t]+)?(?:\*\*|__)?[ \t]*AI[ \t]+Conviction[ \t]+Score[ \t]*:?[ \t]*(?:\*\*|__)?[ \t]*:?[ \t]*'
    r'(?P<score>[^\n]*?)[ \t]*/[ \t]*10\b'
    r'(?:[ \t]*\((?P<reason>[^\n]*)\))?[^\n]*(?:\r?\n)?',
    re.IGNORECASE | re.MULTILINE,
)


def extract_social_summary(text: str):
    """Return (residual_text, summary). summary is '' when there is no section."""
    match = SOCIAL_SUMMARY_RE.search(text)
    if not match:
        return text, ""
    summary = text[match.end():].strip()
    residual = text[:match.start()].rstrip()
    return residual, summary


def extract_conviction(text: str):
    """Return (residual_text, score, reason). Score falls back to 0.0."""
    match = CONVICTION_RE.search(text)
    if not match:
        return text, 0.0, ""

    try:
        score = float(match.group('score').strip())
    except (AttributeError, ValueError):
        score = 0.0
    if score != score:  # NaN
        score = 0.0
    score = max(0.0, min(10.0, score))

    reason = (match.group('reason') or "").strip()
    residual = text[:match.start()] + text[match.end():]
    return residual, score, reason


def process_report(markdown) -> ProcessedReport:
    """
    Split the raw AI markdown into display text plus structured fields.

    Social summary is extracted first, then the conviction line is looked up
    in what remains. If neither is found the markdown comes back untouched.
    """
    if not isinstance(markdown, str):
        markdown = ""

    working, social_summary = extract_social_summary(markdown)
    working, score, reason = extract_conviction(working)

    return ProcessedReport(
        display_markdown=working,
        social_summary=social_summary,
        confidence_score=score,
        conviction_reason=reason,
    )


def conviction_label(score: float) -> str:
    if score >= 7:
        return "High"
    if score >= 4:
        return "Moderate"
    if score > 0:
        return "Low"
    return "N/A"
