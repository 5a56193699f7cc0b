"""
Tests for the forgot-password / reset-password flow.
"""
from urllib.parse import parse_qs, urlparse

from marketplace.errors import MailDeliveryError


class FailingMailer:
    async def send(self, to, subject, body):
        raise MailDeliveryError()


def token_from(mail):
    link = mail["body"].split("link: ", 1)[1].strip()
    assert link.startswith("http://localhost:3000/reset-password?")
    return parse_qs(urlparse(link).query)["token"][0]


def login(client, password, email="a@b.com"):
    return client.post("/user/login", json={"email": email, "password": password})


def test_forgot_password_unknown_email(client, mailer):
    response = client.post("/user/forgot_password", json={"email": "ghost@b.com"})
    assert response.status_code == 404
    assert mailer.sent == []


def test_forgot_password_sends_reset_link(client, mailer, register_user):
    register_user(email="a@b.com")
    response = client.post("/user/forgot_password", json={"email": "a@b.com"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Password reset email sent"}

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "a@b.com"
    assert mailer.sent[0]["subject"] == "Password Reset"
    assert token_from(mailer.sent[0])


def test_reset_password_changes_hash(client, mailer, register_user):
    register_user(email="a@b.com", password="pw123456")
    client.post("/user/forgot_password", json={"email": "a@b.com"})
    token = token_from(mailer.sent[0])

    response = client.post("/user/reset_password", json={"token": token, "newPassword": "new-secret"})
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert login(client, "new-secret").status_code == 200
    assert login(client, "pw123456").status_code == 400


def test_reset_token_is_single_use(client, mailer, register_user):
    register_user(email="a@b.com")
    client.post("/user/forgot_password", json={"email": "a@b.com"})
    token = token_from(mailer.sent[0])

    first = client.post("/user/reset_password", json={"token": token, "newPassword": "first"})
    second = client.post("/user/reset_password", json={"token": token, "newPassword": "second"})
    assert first.status_code == 200
    assert second.status_code == 401
    assert login(client, "first").status_code == 200


def test_expired_reset_token_leaves_password(make_client, mailer):
    client = make_client(reset_token_expire_minutes=-1)
    client.post("/user/register", json={"email": "a@b.com", "password": "pw123456"})
    client.post("/user/forgot_password", json={"email": "a@b.com"})
    token = token_from(mailer.sent[0])

    response = client.post("/user/reset_password", json={"token": token, "newPassword": "new-secret"})
    assert response.status_code == 401
    assert response.json()["success"] is False
    assert login(client, "pw123456").status_code == 200


def test_garbage_reset_token(client):
    response = client.post("/user/reset_password", json={"token": "garbage", "newPassword": "x"})
    assert response.status_code == 401


def test_access_token_cannot_reset_password(client, register_user):
    created = register_user(email="a@b.com")
    response = client.post("/user/reset_password", json={"token": created["token"], "newPassword": "x"})
    assert response.status_code == 401
    assert login(client, "pw123456").status_code == 200


def test_mail_failure_is_server_error(make_client):
    client = make_client(mail_transport=FailingMailer())
    client.post("/user/register", json={"email": "a@b.com", "password": "pw123456"})
    response = client.post("/user/forgot_password", json={"email": "a@b.com"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to send email"}
