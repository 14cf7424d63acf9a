import pytest

from tests.utils import API, add_member, create_project, create_task, create_team, register


async def setup_task(make_client):
    alice_client, bob_client = make_client(), make_client()
    await register(alice_client, "alice")
    bob = await register(bob_client, "bob")
    team = await create_team(alice_client)
    await add_member(alice_client, team["id"], bob["id"])
    project = await create_project(alice_client, team["id"])
    task = await create_task(alice_client, project["id"])
    return alice_client, bob_client, task


@pytest.mark.asyncio
async def test_comments_newest_first_with_author(make_client):
    """Комментарии возвращаются новыми первыми, вместе с публичным профилем автора."""
    alice_client, bob_client, task = await setup_task(make_client)

    response = await alice_client.post(f"{API}/tasks/{task['id']}/comments", json={"content": "first"})
    assert response.status_code == 201
    created = response.json()
    assert created["user"]["username"] == "alice"
    assert created["taskId"] == task["id"]
    assert created["createdAt"]

    await bob_client.post(f"{API}/tasks/{task['id']}/comments", json={"content": "second"})

    response = await bob_client.get(f"{API}/tasks/{task['id']}/comments")
    assert response.status_code == 200
    comments = response.json()
    assert [c["content"] for c in comments] == ["second", "first"]
    assert [c["user"]["username"] for c in comments] == ["bob", "alice"]
    assert all("passwordHash" not in c["user"] for c in comments)


@pytest.mark.asyncio
async def test_empty_comment_rejected(make_client):
    alice_client, _, task = await setup_task(make_client)
    response = await alice_client.post(f"{API}/tasks/{task['id']}/comments", json={"content": ""})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_comment_delete_permissions(make_client):
    alice_client, bob_client, task = await setup_task(make_client)
    by_alice = (await alice_client.post(f"{API}/tasks/{task['id']}/comments", json={"content": "a"})).json()
    by_bob = (await bob_client.post(f"{API}/tasks/{task['id']}/comments", json={"content": "b"})).json()

    # plain member cannot delete someone else's comment
    response = await bob_client.delete(f"{API}/comments/{by_alice['id']}")
    assert response.status_code == 403

    # the author can
    response = await bob_client.delete(f"{API}/comments/{by_bob['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Comment deleted successfully"}

    # team admin can delete anyone's
    bob_again = (await bob_client.post(f"{API}/tasks/{task['id']}/comments", json={"content": "c"})).json()
    response = await alice_client.delete(f"{API}/comments/{bob_again['id']}")
    assert response.status_code == 200

    response = await alice_client.delete(f"{API}/comments/{bob_again['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_outsider_cannot_comment(make_client):
    _, _, task = await setup_task(make_client)
    outsider = make_client()
    await register(outsider, "mallory")

    response = await outsider.post(f"{API}/tasks/{task['id']}/comments", json={"content": "hi"})
    assert response.status_code == 403
    assert (await outsider.get(f"{API}/tasks/{task['id']}/comments")).status_code == 403
