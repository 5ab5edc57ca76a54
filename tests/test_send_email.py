import smtplib
from unittest import mock

import pytest

from stratal.send_email import EmailError, build_mime_email, send_email_task


def make_params(**overrides):
    params = {
        "smtp_host": "smtp.example.com",
        "smtp_port": "465",
        "smtp_user": "mailer@example.com",
        "smtp_password": "password",
        "from": "mailer@example.com",
        "to": "a@example.com,b@example.com",
        "subject": "Hi",
        "body_html": "<p>Hello</p>",
    }
    params.update(overrides)
    return params


def ok_server(smtp_cls):
    server = smtp_cls.return_value
    server.mail.return_value = (250, b"ok")
    server.rcpt.return_value = (250, b"ok")
    server.data.return_value = (250, b"ok")
    return server


def test_missing_parameters_are_listed_in_order():
    with pytest.raises(EmailError) as info:
        send_email_task({"smtp_host": "smtp.example.com", "to": "a@example.com"})
    assert str(info.value) == (
        "missing required parameters: smtp_port, smtp_user, smtp_password, "
        "from, subject, body_html"
    )


def test_html_only_message():
    message = build_mime_email(
        "from@example.com", ["a@example.com", "b@example.com"], "Subj", "<b>x</b>", ""
    )
    assert message == (
        "From: from@example.com\r\nTo: a@example.com,b@example.com\r\nSubject: Subj\r\n"
        'MIME-version: 1.0;\nContent-Type: text/html; charset="UTF-8";\n\r\n<b>x</b>'
    )


def test_multipart_message_holds_both_bodies():
    message = build_mime_email("from@example.com", ["a@example.com"], "S", "<i>h</i>", "plain")
    assert message.startswith("From: from@example.com\nTo: a@example.com\nSubject: S\n")
    assert 'boundary="mixed-boundary"' in message
    assert message.index("plain") < message.index("<i>h</i>")
    assert message.endswith("--mixed-boundary--")
    assert message.count("--mixed-boundary\n") == 2


def test_send_uses_tls_and_each_recipient():
    with mock.patch("stratal.send_email.smtplib.SMTP_SSL") as smtp_cls:
        server = ok_server(smtp_cls)
        result = send_email_task(make_params())
    assert result is None
    assert smtp_cls.call_args.args == ("smtp.example.com", 465)
    server.login.assert_called_once_with("mailer@example.com", "password")
    server.mail.assert_called_once_with("mailer@example.com")
    assert server.rcpt.call_args_list == [
        mock.call("a@example.com"),
        mock.call("b@example.com"),
    ]
    payload = server.data.call_args.args[0]
    assert b"Subject: Hi\r\n" in payload
    assert b"<p>Hello</p>" in payload


def test_rejected_recipient_is_reported():
    with mock.patch("stratal.send_email.smtplib.SMTP_SSL") as smtp_cls:
        server = ok_server(smtp_cls)
        server.rcpt.side_effect = [(250, b"ok"), (550, b"no such user")]
        with pytest.raises(EmailError, match="RCPT TO failed for b@example.com"):
            send_email_task(make_params())
    server.data.assert_not_called()


def test_auth_failure_is_reported():
    with mock.patch("stratal.send_email.smtplib.SMTP_SSL") as smtp_cls:
        server = ok_server(smtp_cls)
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad")
        with pytest.raises(EmailError, match="smtp auth failed"):
            send_email_task(make_params())
    server.mail.assert_not_called()


def test_connection_failure_is_reported():
    with mock.patch("stratal.send_email.smtplib.SMTP_SSL") as smtp_cls:
        smtp_cls.side_effect = ConnectionRefusedError("refused")
        with pytest.raises(EmailError, match="tls dial failed"):
            send_email_task(make_params())


def test_invalid_port_is_reported():
    with pytest.raises(EmailError, match="tls dial failed"):
        send_email_task(make_params(smtp_port="abc"))