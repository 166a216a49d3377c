from __future__ import annotations
import asyncio
import logging
from email.message import EmailMessage
from email.utils import formataddr, parseaddr
from urllib.parse import urlencode

import aiosmtplib
from flask import current_app, render_template

log = logging.getLogger(__name__)


class MailError(Exception):
    pass


class Mailer:
    """Письма из шаблонов templates/mail/*.{txt,html}; SMTP через aiosmtplib."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions["mailer"] = self

    # ---------- ссылки ----------
    @staticmethod
    def frontend_url(path: str, **query) -> str:
        base = current_app.config["APP_BASE_URL"].rstrip("/")
        url = f"{base}/{path.lstrip('/')}"
        if query:
            url += "?" + urlencode(query)
        return url

    # ---------- отправка ----------
    def build_message(self, to_email: str, to_name: str, subject: str, template: str, **ctx) -> EmailMessage:
        sender_name, sender_addr = parseaddr(current_app.config["EMAIL_FROM"])
        if not sender_addr or "@" not in sender_addr:
            sender_addr = current_app.config.get("SMTP_USERNAME") or "no-reply@localhost"
            sender_name = sender_name or current_app.config["EMAIL_FROM"]

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((sender_name, sender_addr))
        msg["To"] = formataddr((to_name, to_email))
        msg.set_content(render_template(f"mail/{template}.txt", **ctx))
        msg.add_alternative(render_template(f"mail/{template}.html", **ctx), subtype="html")
        return msg

    def send_templated(self, to_email: str, to_name: str, subject: str, template: str, **ctx) -> None:
        message = self.build_message(to_email, to_name, subject, template, user_name=to_name, **ctx)
        self._deliver(message)
        log.info("mail %s sent to %s", template, to_email)

    def _deliver(self, message: EmailMessage) -> None:
        cfg = current_app.config
        if not cfg.get("SMTP_HOST"):
            log.warning("SMTP_HOST is not configured, mail to %s not delivered", message["To"])
            return
        try:
            asyncio.run(aiosmtplib.send(
                message,
                hostname=cfg["SMTP_HOST"],
                port=cfg["SMTP_PORT"],
                username=cfg.get("SMTP_USERNAME") or None,
                password=cfg.get("SMTP_PASSWORD") or None,
                start_tls=cfg["SMTP_PORT"] != 465,
                use_tls=cfg["SMTP_PORT"] == 465,
            ))
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise MailError(f"smtp delivery failed: {exc}") from exc

    # ---------- сценарии ----------
    def send_account_confirmation(self, to_email: str, to_name: str, token: str) -> None:
        self.send_templated(
            to_email, to_name, "Confirm your account", "confirm",
            url=self.frontend_url("/confirm", t=token),
        )

    def send_password_reset(self, to_email: str, to_name: str, token: str, *, admin: bool = False) -> None:
        path = "/admin/password-reset" if admin else "/password-reset"
        self.send_templated(
            to_email, to_name, "Reset your password", "reset",
            url=self.frontend_url(path, t=token),
        )

    def send_admin_welcome(self, to_email: str, to_name: str, password: str) -> None:
        self.send_templated(
            to_email, to_name, "Welcome to Advanced Programming Administration", "admin_welcome",
            email=to_email, password=password, login_url=self.frontend_url("/admin/login"),
        )
