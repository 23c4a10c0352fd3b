"""
Analyst Console - Utils Module
Report post-processing and share helpers.
"""

from utils.report_parser import (
    ProcessedReport,
    process_report,
    extract_social_summary,
    extract_conviction,
    conviction_label
)
from utils.share_links import (
    build_share_text,
    build_tweet_url,
    build_mailto_url,
    report_filename
)

__all__ = [
    'ProcessedReport',
    'process_report',
    'extract_social_summary',
    'extract_conviction',
    'conviction_label',
    'build_share_text',
    'build_tweet_url',
    'build_mailto_url',
    'report_filename'
]
