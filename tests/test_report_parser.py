"""
Report post-processor tests.
"""
import pytest

from utils.report_parser import (
    conviction_label,
    extract_conviction,
    extract_social_summary,
    process_report,
)

pytestmark = pytest.mark.unit

REPORT = """## BTCUSD Technical Analysis

### 1. 2H & 4H Analysis (Lower Time Frame)
Price is holding the 96k level.

### 5. Final Summary
Bias: Long above 95,800.

**AI Conviction Score:** 7.5/10 (Strong Confluence)

### Social Media Summary
$BTC holding 96k! Bias long above 95.8k; targets 98k/100k. Invalidation < 94.2k (weekly sweep). #Bitcoin
"""


class TestConviction:

    def test_score_and_reason_extracted(self):
        result = process_report("Intro\n**AI Conviction Score:** 7.5/10 (Strong Confluence)\nOutro")
        assert result.confidence_score == 7.5
        assert result.conviction_reason == "Strong Confluence"
        assert "**AI Conviction Score:** 7.5/10 (Strong Confluence)" not in result.display_markdown
        assert result.display_markdown == "Intro\nOutro"

    def test_missing_line_leaves_text_unchanged(self):
        text = "## Report\n\nNo score here."
        result = process_report(text)
        assert result.confidence_score == 0
        assert result.conviction_reason == ""
        assert result.display_markdown == text

    def test_reason_is_optional(self):
        _, score, reason = extract_conviction("**AI Conviction Score:** 6/10\n")
        assert score == 6.0
        assert reason == ""

    @pytest.mark.parametrize("line", [
        "AI Conviction Score: 8/10 (Trend aligned)",
        "**AI Conviction Score**: 8/10 (Trend aligned)",
        "- **AI Conviction Score:** 8 / 10 (Trend aligned)",
        "__ai conviction score:__ 8.0/10 (Trend aligned)",
    ])
    def test_label_variants(self, line):
        residual, score, reason = extract_conviction(f"top\n{line}\nbottom")
        assert score == 8.0
        assert reason == "Trend aligned"
        assert residual == "top\nbottom"

    def test_nested_parentheses_in_reason(self):
        _, _, reason = extract_conviction("**AI Conviction Score:** 5/10 (Mixed (HTF bearish) signals)")
        assert reason == "Mixed (HTF bearish) signals"

    def test_unparsable_score_falls_back_to_zero(self):
        residual, score, reason = extract_conviction("**AI Conviction Score:** N/A/10 (No data)")
        assert score == 0.0
        assert reason == "No data"
        assert residual == ""

    def test_score_is_clamped(self):
        _, score, _ = extract_conviction("**AI Conviction Score:** 12/10")
        assert score == 10.0

    def test_only_first_line_is_extracted(self):
        text = "**AI Conviction Score:** 3/10 (a)\n**AI Conviction Score:** 9/10 (b)\n"
        residual, score, reason = extract_conviction(text)
        assert (score, reason) == (3.0, "a")
        assert "9/10 (b)" in residual


class TestSocialSummary:

    def test_isolates_text_after_heading(self):
        text = "Body\n\n### Social Media Summary\nBTC: bullish; 96k -> 100k?! (NFA) #crypto"
        residual, summary = extract_social_summary(text)
        assert summary == "BTC: bullish; 96k -> 100k?! (NFA) #crypto"
        assert residual == "Body"

    def test_multiline_summary_kept_whole(self):
        text = "Body\n## Social Media Summary:\nLine one.\n\nLine two, with punctuation: yes!\n"
        _, summary = extract_social_summary(text)
        assert summary == "Line one.\n\nLine two, with punctuation: yes!"

    @pytest.mark.parametrize("heading", [
        "### Social Media Summary",
        "### 6. Social Media Summary",
        "**Social Media Summary:**",
        "#### **Social Media Summary**",
        "### social media summary",
    ])
    def test_heading_variants(self, heading):
        _, summary = extract_social_summary(f"Body\n{heading}\nPost text")
        assert summary == "Post text"

    def test_mention_inside_sentence_is_not_a_heading(self):
        text = "See the Social Media Summary below for details."
        residual, summary = extract_social_summary(text)
        assert summary == ""
        assert residual == text


class TestProcessReport:

    def test_full_report(self):
        result = process_report(REPORT)
        assert result.confidence_score == 7.5
        assert result.conviction_reason == "Strong Confluence"
        assert result.social_summary.startswith("$BTC holding 96k!")
        assert result.social_summary.endswith("#Bitcoin")
        assert "Social Media Summary" not in result.display_markdown
        assert "AI Conviction Score" not in result.display_markdown
        assert "### 5. Final Summary" in result.display_markdown

    def test_conviction_inside_social_section_goes_with_it(self):
        text = "Body\n### Social Media Summary\nPost\n**AI Conviction Score:** 9/10 (x)"
        result = process_report(text)
        assert result.confidence_score == 0.0
        assert "AI Conviction Score" in result.social_summary

    @pytest.mark.parametrize("value", [None, 42, b"bytes"])
    def test_never_raises(self, value):
        result = process_report(value)
        assert result.display_markdown == ""
        assert result.confidence_score == 0.0

    def test_empty_string(self):
        result = process_report("")
        assert result.display_markdown == ""
        assert result.social_summary == ""


class TestConvictionLabel:

    @pytest.mark.parametrize("score,label", [
        (9.0, "High"), (7.0, "High"), (6.9, "Moderate"), (4.0, "Moderate"),
        (1.5, "Low"), (0.0, "N/A"),
    ])
    def test_bands(self, score, label):
        assert conviction_label(score) == label
