"""
Markdown and PDF export of a processed report.
"""
import pytest

from report_export import _inline, build_markdown_export, generate_pdf_report
from technical_data import GroundingSource
from utils.report_parser import ProcessedReport, process_report

pytestmark = pytest.mark.unit

RAW = """## BTCUSD Technical Analysis

### 1. 2H & 4H Analysis (Lower Time Frame)
- **Support** at 96k & 95.8k
- *Invalidation* < 94.2k

---

**AI Conviction Score:** 7.5/10 (Strong Confluence)

### Social Media Summary
$BTC long above 95.8k. #Bitcoin
"""

SOURCES = [GroundingSource(title="Funding <rates>", uri="https://example.com/a?x=1&y=2")]


@pytest.fixture
def report():
    return process_report(RAW)


class TestMarkdownExport:

    def test_reassembles_extracted_fields(self, report):
        text = build_markdown_export("BTCUSD", report, SOURCES)
        assert text.startswith("## BTCUSD Technical Analysis")
        assert "**AI Conviction Score:** 7.5/10 (Strong Confluence)" in text
        assert "### Social Media Summary\n$BTC long above 95.8k. #Bitcoin" in text
        assert "- [Funding <rates>](https://example.com/a?x=1&y=2)" in text

    def test_omits_missing_parts(self):
        text = build_markdown_export("ETHUSD", ProcessedReport(display_markdown="Body"))
        assert "Conviction" not in text
        assert "Social Media Summary" not in text
        assert "Sources" not in text
        assert "ETHUSD" in text


class TestPdf:

    def test_produces_pdf_bytes(self, report):
        pdf = generate_pdf_report("BTCUSD", report, SOURCES)
        assert isinstance(pdf, bytes)
        assert pdf.startswith(b"%PDF")

    def test_plain_report(self):
        pdf = generate_pdf_report("TOTAL3", ProcessedReport(display_markdown="Just <text> & more"))
        assert pdf.startswith(b"%PDF")

    def test_inline_markup(self):
        assert _inline("**Bold** and *ital* < 5") == "<b>Bold</b> and <i>ital</i> &lt; 5"
