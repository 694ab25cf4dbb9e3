"""Email service for sending magic links."""
import asyncio
import logging

from samit.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Handles email sending in dev and production modes."""

    def __init__(self):
        self.mode = settings.email_mode
        if self.mode == "prod":
            try:
                from sendgrid import SendGridAPIClient
                self.sendgrid_client = SendGridAPIClient(settings.sendgrid_api_key)
            except ImportError:
                logger.error("SendGrid not installed but email_mode is 'prod'")
                raise
        else:
            self.sendgrid_client = None

    async def send_magic_link_email(self, email: str, magic_link: str) -> bool:
        """Send the sign-in link to a user."""
        subject = "Your SAMIT sign-in link"
        ttl = settings.magic_link_ttl_minutes

        text_content = (
            f"Open this link to sign in to SAMIT:\n{magic_link}\n\n"
            f"The link works once and expires in {ttl} minutes."
        )
        html_content = (
            f"<p>Open this link to sign in to SAMIT:</p>"
            f"<p><a href=\"{magic_link}\">{magic_link}</a></p>"
            f"<p>The link works once and expires in {ttl} minutes.</p>"
        )

        return await self._send_email(email, subject, text_content, html_content)

    async def _send_email(self, to_email: str, subject: str, text_content: str, html_content: str) -> bool:
        """Send via SendGrid, or log the message in dev mode."""
        if self.mode == "dev":
            logger.info(f"[DEV MODE] Email to {to_email}: {subject}")
            logger.info(f"[DEV MODE] Content:\n{text_content}")
            return True

        try:
            from sendgrid.helpers.mail import Mail, Email, To, Content

            mail = Mail(
                from_email=Email(settings.email_from, "SAMIT"),
                to_emails=To(to_email),
                subject=subject,
                plain_text_content=Content("text/plain", text_content),
                html_content=Content("text/html", html_content)
            )

            # The SendGrid client is blocking
            response = await asyncio.to_thread(self.sendgrid_client.send, mail)

            if 200 <= response.status_code < 300:
                logger.info(f"Email sent to {to_email}: {subject}")
                return True
            else:
                logger.error(f"Failed to send email to {to_email}: {response.status_code}")
                return False
        except Exception as e:
            logger.error(f"Error sending email to {to_email}: {str(e)}")
            return False


# Global email service instance
email_service = EmailService()
