"""Email notifier backed by Django's mail and template layers."""
import logging
from typing import Any, Dict

from django.core.mail import EmailMessage
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


class MailNotifier:
    """Sends templated HTML emails."""

    def __init__(self, sender: str, subject: str = 'Invitation'):
        self.sender = sender
        self.subject = subject

    def send(self, recipient: str, template_ref: str, template_data: Dict[str, Any]) -> None:
        body = render_to_string(template_ref, template_data)

        message = EmailMessage(self.subject, body, self.sender, [recipient])
        message.content_subtype = 'html'
        message.send()

        logger.info(f"Sent '{self.subject}' email to {recipient}")


def get_notifier() -> MailNotifier:
    """Create a notifier using settings.MAILER_SENDER."""
    from django.conf import settings
    return MailNotifier(settings.MAILER_SENDER)
