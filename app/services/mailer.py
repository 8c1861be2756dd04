import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from fastapi import Request

from app.core.config import Settings
from app.core.errors import MailDeliveryError


logger = logging.getLogger(__name__)


RESET_SUBJECT = "Recuperação de senha"


def password_reset_html(reset_link: str) -> str:
    return f"""
        <h2>Recuperação de senha</h2>
        <p>Clique no link abaixo para redefinir sua senha. O link expira em 1 hora:</p>
        <a href="{reset_link}">{reset_link}</a>
        <br/><br/>
        <p>Se você não solicitou isso, ignore este e-mail.</p>
    """


def password_reset_text(reset_link: str) -> str:
    return (
        "Recuperação de senha\n\n"
        "Acesse o link abaixo para redefinir sua senha. O link expira em 1 hora:\n"
        f"{reset_link}\n\n"
        "Se você não solicitou isso, ignore este e-mail.\n"
    )


class Mailer:
    """Envio de e-mail transacional via SMTP (sem retry)."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.use_ssl = settings.smtp_use_ssl
        self.timeout = settings.smtp_timeout
        self.username = settings.email_user
        self.password = settings.email_pass
        self.from_address = settings.email_from

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.use_ssl:
            server = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            server.starttls(context=context)
        server.login(self.username, self.password)
        return server

    def verify(self) -> None:
        try:
            server = self._connect()
            server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Erro na configuração SMTP: {e}")
            raise MailDeliveryError() from e
        logger.info("SMTP configurado com sucesso")

    def send(self, to: str, subject: str, html: str, text: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            server = self._connect()
            try:
                server.sendmail(self.username, [to], msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Falha no envio de e-mail via {self.host}: {e}")
            raise MailDeliveryError() from e

    def send_password_reset(self, to: str, reset_link: str) -> None:
        self.send(
            to,
            RESET_SUBJECT,
            html=password_reset_html(reset_link),
            text=password_reset_text(reset_link),
        )
        logger.info("E-mail de recuperação enviado")


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
