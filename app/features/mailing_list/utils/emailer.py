import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.platform.logger import get_logger
from app.platform.services.email import send_email

logger = get_logger(__name__)

current_dir = os.path.dirname(os.path.abspath(__file__))
template_dir = os.path.join(current_dir, "../template")

if not os.path.exists(template_dir):
    template_dir = os.path.join(os.getcwd(), "app/features/mailing_list/template")

env = Environment(loader=FileSystemLoader(template_dir), autoescape=select_autoescape(["html"]))


def send_welcome_email(to_email: str, name: str | None = None):
    try:
        template = env.get_template("welcome_email.html")
        html_content = template.render(name=name)
        send_email(to_email, "Thanks for subscribing", html_content)
    except Exception as e:
        logger.error(f"Failed to send welcome email to {to_email}: {e}")
