import pytest

from tests.utils import API, add_member, create_project, create_task, create_team, register


def file_payload(project_id, task_id=None, name="spec.pdf"):
    payload = {
        "name": name,
        "url": f"https://files.example.com/{name}",
        "size": 2048,
        "type": "application/pdf",
        "projectId": project_id,
    }
    if task_id is not None:
        payload["taskId"] = task_id
    return payload


@pytest.mark.asyncio
async def test_upload_and_list_files(make_client):
    alice_client, bob_client = make_client(), make_client()
    alice = await register(alice_client, "alice")
    bob = await register(bob_client, "bob")
    team = await create_team(alice_client)
    await add_member(alice_client, team["id"], bob["id"])
    project = await create_project(alice_client, team["id"])
    task = await create_task(alice_client, project["id"])

    response = await alice_client.post(f"{API}/files", json=file_payload(project["id"], name="brief.pdf"))
    assert response.status_code == 201
    brief = response.json()
    assert brief["uploadedBy"] == alice["id"]
    assert brief["uploadedAt"]
    assert brief["taskId"] is None

    response = await bob_client.post(f"{API}/files", json=file_payload(project["id"], task["id"], "mock.png"))
    assert response.status_code == 201

    response = await bob_client.get(f"{API}/projects/{project['id']}/files")
    assert [f["name"] for f in response.json()] == ["mock.png", "brief.pdf"]

    response = await bob_client.get(f"{API}/tasks/{task['id']}/files")
    assert [f["name"] for f in response.json()] == ["mock.png"]


@pytest.mark.asyncio
async def test_file_task_must_belong_to_project(async_client):
    await register(async_client, "alice")
    team = await create_team(async_client)
    first = await create_project(async_client, team["id"], "First")
    second = await create_project(async_client, team["id"], "Second")
    task = await create_task(async_client, second["id"])

    response = await async_client.post(f"{API}/files", json=file_payload(first["id"], task["id"]))
    assert response.status_code == 400
    assert response.json()["message"] == "Task does not belong to this project"


@pytest.mark.asyncio
async def test_file_upload_and_delete_permissions(make_client):
    alice_client, bob_client = make_client(), make_client()
    await register(alice_client, "alice")
    bob = await register(bob_client, "bob")
    team = await create_team(alice_client)
    project = await create_project(alice_client, team["id"])

    response = await bob_client.post(f"{API}/files", json=file_payload(project["id"]))
    assert response.status_code == 403

    await add_member(alice_client, team["id"], bob["id"])
    by_alice = (await alice_client.post(f"{API}/files", json=file_payload(project["id"], name="a.pdf"))).json()
    by_bob = (await bob_client.post(f"{API}/files", json=file_payload(project["id"], name="b.pdf"))).json()

    assert (await bob_client.delete(f"{API}/files/{by_alice['id']}")).status_code == 403
    assert (await bob_client.delete(f"{API}/files/{by_bob['id']}")).status_code == 200
    response = await alice_client.delete(f"{API}/files/{by_alice['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "File deleted successfully"}
    assert (await alice_client.get(f"{API}/projects/{project['id']}/files")).json() == []


@pytest.mark.asyncio
async def test_negative_size_rejected(async_client):
    await register(async_client, "alice")
    team = await create_team(async_client)
    project = await create_project(async_client, team["id"])
    payload = file_payload(project["id"])
    payload["size"] = -1

    response = await async_client.post(f"{API}/files", json=payload)
    assert response.status_code == 400
