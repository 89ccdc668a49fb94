"""Email service for sending report PDFs."""
import os
import re

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.features.reports.services.pdf_report import build_report_pdf
from app.features.reports.utils.report_parser import summarize_report
from app.platform.logger import get_logger
from app.platform.services.email import EmailAttachment, send_email

logger = get_logger(__name__)

current_dir = os.path.dirname(os.path.abspath(__file__))
template_dir = os.path.join(current_dir, "../template")

if not os.path.exists(template_dir):
    template_dir = os.path.join(os.getcwd(), "app/features/reports/template")

env = Environment(loader=FileSystemLoader(template_dir), autoescape=select_autoescape(["html"]))


def report_filename(url: str) -> str:
    """``https://www.example.com/a`` -> ``report-www.example.com-a.pdf``"""
    stripped = re.sub(r"^https?://", "", url).strip("/")
    slug = re.sub(r"[^A-Za-z0-9.-]+", "-", stripped).strip("-") or "site"
    return f"report-{slug}.pdf"


def render_report_email(url: str, report: dict) -> str:
    template = env.get_template("report_email.html")
    return template.render(summary=summarize_report(url, report))


def send_report_email(to_email: str, url: str, report: dict):
    """Render the PDF for ``report`` and mail it to ``to_email``. Runs as a background task."""
    try:
        pdf_bytes = build_report_pdf(url, report)
        body = render_report_email(url, report)
        send_email(
            to_email,
            f"Your website report for {url}",
            body,
            attachments=[EmailAttachment(filename=report_filename(url), content=pdf_bytes)],
        )
        logger.info(f"Report for {url} emailed to {to_email}")
    except Exception as e:
        logger.error(f"Failed to email report for {url} to {to_email}: {e}")
