"""
Analyst Console - Report Export
Markdown and PDF downloads of a processed analysis.
"""

import io
import re
from datetime import datetime
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from technical_data import GroundingSource
from utils.report_parser import ProcessedReport, conviction_label


def build_markdown_export(ticker: str, report: ProcessedReport, sources: List[GroundingSource] = None) -> str:
    """Re-assemble the report (with the extracted fields) as one markdown file."""
    lines = [report.display_markdown.rstrip(), ""]

    if report.confidence_score > 0:
        reason = f" ({report.conviction_reason})" if report.conviction_reason else ""
        lines.append(f"**AI Conviction Score:** {report.confidence_score:g}/10{reason}")
        lines.append("")

    if report.social_summary:
        lines.extend(["### Social Media Summary", report.social_summary, ""])

    if sources:
        lines.append("### Sources & References")
        lines.extend(f"- [{s.title}]({s.uri})" for s in sources)
        lines.append("")

    lines.append(f"*{ticker} - generated {datetime.now().strftime('%Y-%m-%d %H:%M')}*")
    return "\n".join(lines)


def _inline(text: str) -> str:
    """Escape for reportlab and turn **bold** / *italic* into tags."""
    text = escape(text)
    text = re.sub(r'\*\*(.+?)\*\*', r'<b>\1</b>', text)
    text = re.sub(r'(?<![*\w])\*(?!\s)(.+?)(?<!\s)\*(?!\*)', r'<i>\1</i>', text)
    return text


def generate_pdf_report(ticker: str, report: ProcessedReport, sources: List[GroundingSource] = None) -> bytes:
    """Render the processed analysis to a PDF document."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, topMargin=0.5*inch, bottomMargin=0.5*inch)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('Title', parent=styles['Heading1'], fontSize=18, textColor=colors.HexColor('#1a1a2e'), alignment=TA_CENTER, spaceAfter=6)
    header_style = ParagraphStyle('Header', parent=styles['Heading2'], fontSize=12, textColor=colors.HexColor('#0f766e'), spaceBefore=12, spaceAfter=6)
    subheader_style = ParagraphStyle('SubHeader', parent=styles['Heading3'], fontSize=10, textColor=colors.HexColor('#0369a1'), spaceBefore=8, spaceAfter=4)
    body_style = ParagraphStyle('Body', parent=styles['Normal'], fontSize=9, textColor=colors.HexColor('#334155'), leading=13)
    small_style = ParagraphStyle('Small', parent=styles['Normal'], fontSize=8, textColor=colors.HexColor('#64748b'), leading=11, alignment=TA_CENTER)
    bullet_style = ParagraphStyle('Bullet', parent=styles['Normal'], fontSize=9, textColor=colors.HexColor('#334155'), leading=13, leftIndent=15)
    score_style = ParagraphStyle('Score', parent=styles['Normal'], fontSize=11, textColor=colors.HexColor('#0f766e'), alignment=TA_CENTER, borderColor=colors.HexColor('#e2e8f0'), borderWidth=1, borderPadding=8, spaceBefore=6, spaceAfter=10)

    elements = [
        Paragraph(f"<b>{escape(ticker)}</b> Technical Analysis", title_style),
        Paragraph(f"Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}", small_style),
        Spacer(1, 0.15*inch),
    ]

    if report.confidence_score > 0:
        reason = f" - {escape(report.conviction_reason)}" if report.conviction_reason else ""
        label = conviction_label(report.confidence_score)
        elements.append(Paragraph(
            f"<b>AI Conviction: {report.confidence_score:g}/10 ({label})</b>{reason}", score_style))

    for raw_line in report.display_markdown.splitlines():
        line = raw_line.strip()
        if not line or re.fullmatch(r'[-*_]{3,}', line):
            continue
        if line.startswith('### ') or line.startswith('#### '):
            elements.append(Paragraph(_inline(line.lstrip('#').strip()), subheader_style))
        elif line.startswith('#'):
            elements.append(Paragraph(_inline(line.lstrip('#').strip()), header_style))
        elif re.match(r'^[-*+]\s+', line):
            elements.append(Paragraph("&bull; " + _inline(re.sub(r'^[-*+]\s+', '', line)), bullet_style))
        else:
            elements.append(Paragraph(_inline(line), body_style))

    if report.social_summary:
        elements.append(Paragraph("Social Media Summary", header_style))
        elements.append(Paragraph(_inline(report.social_summary), body_style))

    if sources:
        elements.append(Paragraph("Sources &amp; References", header_style))
        for s in sources:
            href = escape(s.uri, {'"': '&quot;'})
            elements.append(Paragraph(
                f'&bull; <link href="{href}" color="#0369a1">{escape(s.title)}</link>', bullet_style))

    doc.build(elements)
    return buffer.getvalue()
