import pytest

from tests.utils import API, add_member, create_project, create_task, create_team, register


async def setup_board(make_client):
    """alice: администратор команды, bob: участник; у команды один проект."""
    alice_client, bob_client = make_client(), make_client()
    alice = await register(alice_client, "alice")
    bob = await register(bob_client, "bob")
    team = await create_team(alice_client)
    await add_member(alice_client, team["id"], bob["id"])
    project = await create_project(alice_client, team["id"])
    return alice_client, bob_client, alice, bob, project


@pytest.mark.asyncio
async def test_create_task_defaults(async_client):
    """Тестирует создание задачи со значениями по умолчанию."""
    await register(async_client, "alice")
    team = await create_team(async_client)
    project = await create_project(async_client, team["id"])

    task = await create_task(async_client, project["id"], "Write copy")
    assert task["status"] == "todo"
    assert task["priority"] == "medium"
    assert task["tags"] == []
    assert task["order"] == 0
    assert task["assigneeId"] is None


@pytest.mark.asyncio
async def test_create_task_rejects_unknown_status(async_client):
    await register(async_client, "alice")
    team = await create_team(async_client)
    project = await create_project(async_client, team["id"])

    response = await async_client.post(
        f"{API}/tasks", json={"title": "Bad", "projectId": project["id"], "status": "done"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_tasks_require_membership(make_client):
    alice_client, _, _, _, project = await setup_board(make_client)
    task = await create_task(alice_client, project["id"])

    outsider = make_client()
    await register(outsider, "mallory")
    assert (await outsider.get(f"{API}/tasks/{task['id']}")).status_code == 403
    assert (await outsider.get(f"{API}/tasks", params={"projectId": project["id"]})).status_code == 403
    response = await outsider.post(f"{API}/tasks", json={"title": "x", "projectId": project["id"]})
    assert response.status_code == 403
    assert (await outsider.delete(f"{API}/tasks/{task['id']}")).status_code == 403


@pytest.mark.asyncio
async def test_board_order(make_client):
    alice_client, bob_client, _, _, project = await setup_board(make_client)
    await create_task(alice_client, project["id"], "second", order=2)
    await create_task(alice_client, project["id"], "first", order=1)
    await create_task(alice_client, project["id"], "third", order=2)

    response = await bob_client.get(f"{API}/tasks", params={"projectId": project["id"]})
    assert response.status_code == 200
    assert [t["title"] for t in response.json()] == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_member_updates_and_moves_task(make_client):
    alice_client, bob_client, _, bob, project = await setup_board(make_client)
    task = await create_task(alice_client, project["id"], "Design", tags=["ui"], priority="high")

    response = await bob_client.put(f"{API}/tasks/{task['id']}", json={"assigneeId": bob["id"]})
    assert response.status_code == 200
    assert response.json()["assigneeId"] == bob["id"]
    assert response.json()["tags"] == ["ui"]

    for _ in range(2):
        response = await bob_client.put(f"{API}/tasks/{task['id']}/status", json={"status": "in progress", "order": 3})
        assert response.status_code == 200
    moved = response.json()
    assert moved["status"] == "in progress"
    assert moved["order"] == 3
    assert moved["title"] == "Design"
    assert moved["priority"] == "high"
    assert moved["assigneeId"] == bob["id"]


@pytest.mark.asyncio
async def test_status_update_validation(make_client):
    alice_client, _, _, _, project = await setup_board(make_client)
    task = await create_task(alice_client, project["id"])

    response = await alice_client.put(f"{API}/tasks/{task['id']}/status", json={"status": "todo"})
    assert response.status_code == 400
    response = await alice_client.put(f"{API}/tasks/{task['id']}/status", json={"status": "todo", "order": -1})
    assert response.status_code == 400
    response = await alice_client.put(f"{API}/tasks/999/status", json={"status": "todo", "order": 0})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_assigned_tasks(make_client):
    alice_client, bob_client, alice, bob, project = await setup_board(make_client)
    await create_task(alice_client, project["id"], "for bob", assigneeId=bob["id"])
    await create_task(alice_client, project["id"], "for alice", assigneeId=alice["id"])

    response = await bob_client.get(f"{API}/tasks")
    assert [t["title"] for t in response.json()] == ["for bob"]

    response = await bob_client.get(f"{API}/tasks", params={"assigneeId": bob["id"]})
    assert [t["title"] for t in response.json()] == ["for bob"]

    response = await bob_client.get(f"{API}/tasks", params={"assigneeId": alice["id"]})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_guest_member_can_delete_task(make_client):
    alice_client, _, _, _, project = await setup_board(make_client)
    guest_client = make_client()
    guest = await register(guest_client, "gus")
    await add_member(alice_client, project["teamId"], guest["id"], "guest")
    task = await create_task(alice_client, project["id"])

    response = await guest_client.delete(f"{API}/tasks/{task['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Task deleted successfully"}
    assert (await alice_client.get(f"{API}/tasks/{task['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_assignee_must_exist(make_client):
    alice_client, _, _, _, project = await setup_board(make_client)

    response = await alice_client.post(
        f"{API}/tasks", json={"title": "t", "projectId": project["id"], "assigneeId": 999}
    )
    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}

    task = await create_task(alice_client, project["id"])
    response = await alice_client.put(f"{API}/tasks/{task['id']}", json={"assigneeId": 999})
    assert response.status_code == 404
    assert (await alice_client.get(f"{API}/tasks/{task['id']}")).json()["assigneeId"] is None


@pytest.mark.asyncio
async def test_assignee_must_belong_to_team(make_client):
    alice_client, _, _, bob, project = await setup_board(make_client)
    outsider = make_client()
    mallory = await register(outsider, "mallory")

    response = await alice_client.post(
        f"{API}/tasks", json={"title": "t", "projectId": project["id"], "assigneeId": mallory["id"]}
    )
    assert response.status_code == 400

    task = await create_task(alice_client, project["id"], assigneeId=bob["id"])
    response = await alice_client.put(f"{API}/tasks/{task['id']}", json={"assigneeId": mallory["id"]})
    assert response.status_code == 400

    # unassigning is always allowed
    response = await alice_client.put(f"{API}/tasks/{task['id']}", json={"assigneeId": None})
    assert response.status_code == 200
    assert response.json()["assigneeId"] is None
