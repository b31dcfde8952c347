"""
Outbound email delivery over SMTP, either inline or through the RQ email queue.
"""
import smtplib
import logging
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from datetime import datetime
from typing import Optional, Dict, Any

from moneymanager.config import settings

logger = logging.getLogger(__name__)

XLSX_MIME_SUBTYPE = "vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class EmailService:
    """Sends plain, HTML and attachment emails through the configured SMTP server."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_tls: Optional[bool] = None,
    ):
        self.host = host if host is not None else settings.SMTP_HOST
        self.port = port if port is not None else settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.sender = sender or settings.SMTP_FROM
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls

        self.enabled = bool(self.host)
        if not self.enabled:
            logger.warning("SMTP host not configured. Email service will be disabled.")

    def send_email(self, to_email: str, subject: str, body: str, html: bool = False) -> Dict[str, Any]:
        """
        Send a single-part email.

        Returns:
            Dict with success status and details
        """
        msg = MIMEMultipart('alternative')
        msg.attach(MIMEText(body, 'html' if html else 'plain', 'utf-8'))
        return self._send(msg, to_email, subject)

    def send_email_with_attachment(
        self,
        to_email: str,
        subject: str,
        body: str,
        attachment: bytes,
        filename: str,
    ) -> Dict[str, Any]:
        msg = MIMEMultipart()
        msg.attach(MIMEText(body, 'plain', 'utf-8'))

        part = MIMEApplication(attachment, _subtype=XLSX_MIME_SUBTYPE)
        part.add_header('Content-Disposition', 'attachment', filename=filename)
        msg.attach(part)

        return self._send(msg, to_email, subject)

    def _send(self, msg: MIMEMultipart, to_email: str, subject: str) -> Dict[str, Any]:
        if not self.enabled:
            return {
                'success': False,
                'error': 'Email service not configured',
                'method': 'disabled'
            }

        msg['From'] = self.sender
        msg['To'] = to_email
        msg['Subject'] = subject

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed - check SMTP credentials")
            return {
                'success': False,
                'error': 'Email authentication failed',
                'method': 'smtp_auth_error'
            }
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email to %s failed: %s", to_email, e)
            return {
                'success': False,
                'error': str(e),
                'method': 'smtp_error'
            }

        logger.info("Email '%s' sent to %s", subject, to_email)
        return {
            'success': True,
            'method': 'smtp',
            'to': to_email,
            'sent_at': datetime.utcnow().isoformat(),
        }


class QueuedEmailService:
    """Same interface as EmailService, but hands each email to the RQ email queue."""

    def send_email(self, to_email: str, subject: str, body: str, html: bool = False) -> Dict[str, Any]:
        return self._enqueue(to_email, subject, body, html=html)

    def send_email_with_attachment(
        self,
        to_email: str,
        subject: str,
        body: str,
        attachment: bytes,
        filename: str,
    ) -> Dict[str, Any]:
        return self._enqueue(to_email, subject, body, attachment=attachment, filename=filename)

    def _enqueue(self, to_email: str, subject: str, body: str, **kwargs) -> Dict[str, Any]:
        from moneymanager.services.job_queue import enqueue_email_job

        try:
            job = enqueue_email_job(to_email, subject, body, **kwargs)
        except Exception as e:
            # Redis unreachable or similar; reported to the caller like an SMTP failure
            logger.error("Could not enqueue email to %s: %s", to_email, e)
            return {
                'success': False,
                'error': str(e),
                'method': 'queue_error'
            }
        return {
            'success': True,
            'method': 'queue',
            'to': to_email,
            'job_id': job.id,
        }


def get_mailer():
    """FastAPI dependency returning the mailer selected by EMAIL_DELIVERY."""
    if settings.EMAIL_DELIVERY == "queue":
        return QueuedEmailService()
    return EmailService()
