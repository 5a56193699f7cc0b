"""
Tests for service-provider onboarding with image and document uploads.
"""
import base64

import jwt
from sqlalchemy.exc import SQLAlchemyError

from services.registration import RegistrationService

IMAGE = ("avatar.png", b"\x89PNG\r\n\x1a\nfake-image", "image/png")
DOCUMENT = ("licence.pdf", b"%PDF-1.5\nidentity document", "application/pdf")


def assert_not_registered(client, email):
    response = client.post("/user/login", json={"email": email, "password": "pw123456"})
    assert response.status_code == 404


def test_register_service_provider(client, register_provider):
    response = register_provider(email="pro@b.com")
    assert response.status_code == 201, response.text
    data = response.json()
    user = data["user"]
    assert user["role"] == "serviceProvider"
    assert user["wage"] == 25.0
    assert user["wageType"] == "hourly"
    assert user["image"] == base64.b64encode(IMAGE[1]).decode("ascii")
    assert [doc["name"] for doc in user["documents"]] == ["licence.pdf"]
    assert user["documents"][0]["size"] == len(DOCUMENT[1])
    assert "password" not in user

    claims = jwt.decode(data["token"], "test-secret-key", algorithms=["HS256"])
    assert claims == {"id": user["id"], "role": "serviceProvider", "exp": claims["exp"]}


def test_uploaded_document_can_be_downloaded(client, register_provider):
    user = register_provider().json()["user"]
    document_id = user["documents"][0]["id"]

    response = client.get(f"/user/document/{document_id}")
    assert response.status_code == 200
    assert response.content == DOCUMENT[1]
    assert response.headers["content-type"] == "application/pdf"


def test_missing_document_is_rejected(client, register_provider):
    response = register_provider(email="pro@b.com", files={"image": IMAGE})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Missing required file(s): document"}
    assert_not_registered(client, "pro@b.com")


def test_missing_image_is_rejected(client, register_provider):
    response = register_provider(email="pro@b.com", files={"document": DOCUMENT})
    assert response.status_code == 400
    assert "image" in response.json()["message"]
    assert_not_registered(client, "pro@b.com")


def test_missing_all_files_writes_nothing(client, register_provider):
    response = register_provider(email="pro@b.com", files={})
    assert response.status_code == 400
    assert response.json()["message"] == "Missing required file(s): image, document"
    assert_not_registered(client, "pro@b.com")

    retry = client.post("/user/register", json={"email": "pro@b.com", "password": "pw123456"})
    assert retry.status_code == 201


def test_duplicate_provider_email(client, register_provider, register_user):
    register_user(email="pro@b.com")
    response = register_provider(email="pro@b.com")
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_missing_required_form_field(client):
    response = client.post(
        "/user/registerServiceProvider",
        data={"firstname": "Grace", "email": "pro@b.com", "password": "pw123456"},
        files={"image": IMAGE, "document": DOCUMENT},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_oversize_upload_is_rejected(make_client):
    client = make_client(max_upload_bytes=8)
    response = client.post(
        "/user/registerServiceProvider",
        data={
            "firstname": "Grace",
            "lastname": "Hopper",
            "phoneNo": "555-0100",
            "email": "pro@b.com",
            "password": "pw123456",
            "wageType": "hourly",
            "wage": "25",
        },
        files={"image": IMAGE, "document": DOCUMENT},
    )
    assert response.status_code == 400
    assert "exceeds" in response.json()["message"]


def test_failed_document_write_rolls_back_user(client, register_provider, monkeypatch):
    def broken_document(user, upload):
        raise SQLAlchemyError("document store unavailable")

    monkeypatch.setattr(RegistrationService, "_build_document", staticmethod(broken_document))

    response = register_provider(email="pro@b.com")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error"}
    assert_not_registered(client, "pro@b.com")


def test_unknown_category_is_rejected(client, register_provider):
    response = register_provider(email="pro@b.com", categoryId="missing")
    assert response.status_code == 404
    assert_not_registered(client, "pro@b.com")
