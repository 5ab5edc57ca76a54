"""Built-in task that sends an HTML e-mail over SMTP with TLS."""

from __future__ import annotations

import re
import smtplib
import ssl
from collections.abc import Iterable, Mapping

REQUIRED_PARAMS = (
    "smtp_host",
    "smtp_port",
    "smtp_user",
    "smtp_password",
    "from",
    "to",
    "subject",
    "body_html",
)

_BOUNDARY = "mixed-boundary"


class EmailError(Exception):
    """Sending an e-mail failed."""


def build_mime_email(
    sender: str, to: Iterable[str], subject: str, html: str, text: str
) -> str:
    """Build the message; a plain-text body makes it multipart/alternative."""
    recipients = ",".join(to)
    if text:
        return (
            f"From: {sender}\n"
            f"To: {recipients}\n"
            f"Subject: {subject}\n"
            "MIME-Version: 1.0\n"
            f'Content-Type: multipart/alternative; boundary="{_BOUNDARY}"\n'
            "\n"
            f"--{_BOUNDARY}\n"
            'Content-Type: text/plain; charset="UTF-8"\n'
            "\n"
            f"{text}\n"
            "\n"
            f"--{_BOUNDARY}\n"
            'Content-Type: text/html; charset="UTF-8"\n'
            "\n"
            f"{html}\n"
            "\n"
            f"--{_BOUNDARY}--"
        )
    mime = 'MIME-version: 1.0;\nContent-Type: text/html; charset="UTF-8";\n'
    return f"From: {sender}\r\nTo: {recipients}\r\nSubject: {subject}\r\n{mime}\r\n{html}"


def _check(reply: tuple[int, bytes], accepted: tuple[int, ...], prefix: str) -> None:
    code, message = reply
    if code not in accepted:
        detail = message.decode(errors="replace") if isinstance(message, bytes) else message
        raise EmailError(f"{prefix}: {code} {detail}")


def send_email_task(params: Mapping[str, str]) -> None:
    """Send the e-mail described by ``params``; raise EmailError on failure."""
    missing = [key for key in REQUIRED_PARAMS if key not in params]
    if missing:
        raise EmailError(f"missing required parameters: {', '.join(missing)}")

    host = params["smtp_host"]
    sender = params["from"]
    to = params["to"].split(",")
    message = build_mime_email(
        sender, to, params["subject"], params["body_html"], params.get("body_text", "")
    )
    payload = re.sub(r"\r?\n", "\r\n", message).encode("utf-8")

    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE

    try:
        port = int(params["smtp_port"])
    except ValueError as exc:
        raise EmailError(f"tls dial failed: invalid port {params['smtp_port']!r}") from exc

    try:
        server = smtplib.SMTP_SSL(host, port, context=context)
    except OSError as exc:
        raise EmailError(f"tls dial failed: {exc}") from exc

    with server:
        try:
            server.login(params["smtp_user"], params["smtp_password"])
        except smtplib.SMTPException as exc:
            raise EmailError(f"smtp auth failed: {exc}") from exc

        try:
            _check(server.mail(sender), (250,), "smtp MAIL FROM failed")
        except smtplib.SMTPException as exc:
            raise EmailError(f"smtp MAIL FROM failed: {exc}") from exc

        for recipient in to:
            prefix = f"smtp RCPT TO failed for {recipient}"
            try:
                _check(server.rcpt(recipient), (250, 251), prefix)
            except smtplib.SMTPException as exc:
                raise EmailError(f"{prefix}: {exc}") from exc

        try:
            _check(server.data(payload), (250,), "smtp close failed")
        except smtplib.SMTPException as exc:
            raise EmailError(f"smtp DATA failed: {exc}") from exc