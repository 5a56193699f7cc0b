"""Shared fixtures: an isolated app per test with a temp database and fake mail."""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from marketplace.config import Settings
from marketplace.main import create_app

TEST_SECRET = "test-secret-key"
IMAGE = ("avatar.png", b"\x89PNG\r\n\x1a\nfake-image", "image/png")
DOCUMENT = ("licence.pdf", b"%PDF-1.5\nidentity document", "application/pdf")


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    async def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def make_client(tmp_path, mailer):
    clients = []
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}"

    def factory(mail_transport=None, raise_server_exceptions=True, **overrides):
        settings = Settings(
            _env_file=None,
            jwt_secret_key=TEST_SECRET,
            database_url=database_url,
            **overrides,
        )
        client = TestClient(
            create_app(settings, mailer=mail_transport or mailer),
            raise_server_exceptions=raise_server_exceptions,
        )
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def register_user(client):
    def _register(email="a@b.com", password="pw123456", **fields):
        payload = {"email": email, "password": password, "firstname": "Ada", "lastname": "Lovelace", **fields}
        response = client.post("/user/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def register_provider(client):
    def _register(email="pro@b.com", password="pw123456", files=None, **fields):
        form = {
            "firstname": "Grace",
            "lastname": "Hopper",
            "phoneNo": "555-0100",
            "email": email,
            "password": password,
            "wageType": "hourly",
            "wage": "25",
            **fields,
        }
        upload = {"image": IMAGE, "document": DOCUMENT} if files is None else files
        return client.post("/user/registerServiceProvider", data=form, files=upload)

    return _register

