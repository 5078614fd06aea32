import os
import logging
from typing import Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, To, From, Subject, HtmlContent, PlainTextContent

from app.core.settings import settings

logger = logging.getLogger("app.email")

SENDER_NAME = "Performance & Development"


def get_email_template_env() -> Environment:
    """Get Jinja2 environment for email templates."""
    template_dir = os.path.join(os.path.dirname(__file__), '../templates/email')
    return Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(['html', 'xml'])
    )


def get_sendgrid_client():
    """Get SendGrid client if configured and log diagnostics (without leaking key)."""
    api_key = settings.sendgrid_api_key
    if not api_key or api_key.startswith("your_"):
        logger.warning("[email] SENDGRID_API_KEY missing or placeholder; emails are logged only")
        return None
    logger.debug(f"[email] SendGrid key loaded (length={len(api_key)})")
    try:
        return SendGridAPIClient(api_key)
    except Exception as e:
        logger.error(f"[email] Failed to instantiate SendGrid client: {e}")
        return None


def render_self_evaluation_due_email(employee_name: str, project_title: str, action_url: str) -> Tuple[str, str]:
    """Render the HTML and plain-text bodies asking an employee to self-evaluate."""
    env = get_email_template_env()
    html_content = env.get_template('self_evaluation_due.html').render(
        employee_name=employee_name,
        project_title=project_title,
        action_url=action_url,
        app_url=settings.app_url,
    )
    plain_text = f"""
Project finished - self-evaluation required

Dear {employee_name},

The project "{project_title}" is now finished. Please complete the
self-evaluation of your objectives.

Open your project sheet: {action_url}
    """.strip()
    return html_content, plain_text


def send_email(to_email: str, subject: str, html_content: str,
               plain_content: str, from_email: str = None) -> bool:
    """Send email using SendGrid.

    Logging levels:
    - INFO: success
    - WARNING: configuration issues / skipped send
    - ERROR: failed send attempt with response diagnostics
    """
    client = get_sendgrid_client()
    if not client:
        logger.warning(f"[email] Skipping send to={to_email} subject={subject!r} (client unavailable)")
        return False

    from_email = from_email or settings.email_from_address
    message = Mail(
        from_email=From(from_email, SENDER_NAME),
        to_emails=To(to_email),
        subject=Subject(subject),
        html_content=HtmlContent(html_content),
        plain_text_content=PlainTextContent(plain_content)
    )
    try:
        response = client.send(message)
    except Exception as e:
        logger.error(f"[email] Exception during send to={to_email}: {e}", exc_info=True)
        return False

    if getattr(response, 'status_code', None) in (200, 202):
        logger.info(f"[email] Sent to={to_email} status={response.status_code}")
        return True

    logger.error(f"[email] Failed send to={to_email} status={getattr(response, 'status_code', None)}")
    return False
