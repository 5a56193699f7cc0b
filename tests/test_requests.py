"""
Tests for the request (job application) lifecycle.
"""
import pytest


@pytest.fixture
def task_and_provider(client, register_user, register_provider):
    owner = register_user(email="owner@b.com")["user"]
    provider = register_provider(email="pro@b.com").json()["user"]
    task = client.post(
        "/task", json={"title": "Fix the sink", "ownerId": owner["id"], "budget": 120}
    ).json()["task"]
    return task, provider, owner


@pytest.fixture
def pending_request(client, task_and_provider):
    task, provider, _ = task_and_provider
    response = client.post("/request", json={"taskId": task["id"], "requesterId": provider["id"]})
    assert response.status_code == 201, response.text
    return response.json()["request"]


def test_create_request_starts_pending(pending_request, task_and_provider):
    task, provider, _ = task_and_provider
    assert pending_request["status"] == "pending"
    assert pending_request["taskId"] == task["id"]
    assert pending_request["requesterId"] == provider["id"]


def test_requests_by_task_round_trip(client, pending_request, task_and_provider):
    task, _, owner = task_and_provider
    other_task = client.post("/task", json={"title": "Paint fence", "ownerId": owner["id"]}).json()["task"]

    response = client.get(f"/requests/task/{task['id']}")
    assert response.status_code == 200
    assert [item["id"] for item in response.json()["requests"]] == [pending_request["id"]]

    assert client.get(f"/requests/task/{other_task['id']}").json()["requests"] == []


def test_list_and_get_request(client, pending_request):
    listing = client.get("/requests").json()["requests"]
    assert [item["id"] for item in listing] == [pending_request["id"]]

    single = client.get(f"/request/{pending_request['id']}")
    assert single.status_code == 200
    assert single.json()["request"]["status"] == "pending"


def test_get_unknown_request(client):
    response = client.get("/request/unknown")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Request not found"}


def test_only_providers_can_apply(client, task_and_provider):
    task, _, owner = task_and_provider
    response = client.post("/request", json={"taskId": task["id"], "requesterId": owner["id"]})
    assert response.status_code == 400


def test_apply_to_unknown_task(client, task_and_provider):
    _, provider, _ = task_and_provider
    response = client.post("/request", json={"taskId": "nope", "requesterId": provider["id"]})
    assert response.status_code == 404


def test_accept_pending_request(client, pending_request):
    response = client.post("/request/accept", json={"requestId": pending_request["id"]})
    assert response.status_code == 200
    assert response.json()["request"]["status"] == "accepted"


def test_reject_pending_request(client, pending_request):
    response = client.post("/request/reject", json={"requestId": pending_request["id"]})
    assert response.status_code == 200
    assert response.json()["request"]["status"] == "rejected"


def test_decided_request_cannot_be_redecided(client, pending_request):
    client.post("/request/accept", json={"requestId": pending_request["id"]})

    response = client.post("/request/reject", json={"requestId": pending_request["id"]})
    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Request is already accepted"}

    again = client.post("/request/accept", json={"requestId": pending_request["id"]})
    assert again.status_code == 409
    assert client.get(f"/request/{pending_request['id']}").json()["request"]["status"] == "accepted"


@pytest.mark.parametrize(
    "first, second, expected",
    [("accept", "reject", "rejected"), ("reject", "accept", "accepted")],
)
def test_last_decision_wins_when_redecision_allowed(make_client, first, second, expected):
    client = make_client(allow_request_redecision=True)
    owner = client.post("/user/register", json={"email": "owner@b.com", "password": "pw123456"}).json()["user"]
    provider = client.post(
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
        files={"image": ("a.png", b"img", "image/png"), "document": ("d.pdf", b"doc", "application/pdf")},
    ).json()["user"]
    task = client.post("/task", json={"title": "Fix the sink", "ownerId": owner["id"]}).json()["task"]
    request = client.post("/request", json={"taskId": task["id"], "requesterId": provider["id"]}).json()["request"]

    client.post(f"/request/{first}", json={"requestId": request["id"]})
    response = client.post(f"/request/{second}", json={"requestId": request["id"]})
    assert response.status_code == 200
    assert response.json()["request"]["status"] == expected


def test_accept_unknown_request(client):
    response = client.post("/request/accept", json={"requestId": "missing"})
    assert response.status_code == 404


def test_delete_request(client, pending_request):
    response = client.delete(f"/request/{pending_request['id']}")
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert client.get(f"/request/{pending_request['id']}").status_code == 404
    assert client.delete(f"/request/{pending_request['id']}").status_code == 404
