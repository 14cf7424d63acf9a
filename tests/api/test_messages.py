import pytest

from tests.utils import API, add_member, create_team, register


@pytest.mark.asyncio
async def test_team_chat(make_client):
    """Лента сообщений команды: новые первыми, с автором."""
    alice_client, bob_client = make_client(), make_client()
    await register(alice_client, "alice")
    bob = await register(bob_client, "bob")
    team = await create_team(alice_client)

    response = await bob_client.post(f"{API}/teams/{team['id']}/messages", json={"content": "hi"})
    assert response.status_code == 403

    await add_member(alice_client, team["id"], bob["id"])
    response = await alice_client.post(f"{API}/teams/{team['id']}/messages", json={"content": "welcome"})
    assert response.status_code == 201
    assert response.json()["user"]["username"] == "alice"
    assert response.json()["teamId"] == team["id"]
    await bob_client.post(f"{API}/teams/{team['id']}/messages", json={"content": "thanks"})

    response = await bob_client.get(f"{API}/teams/{team['id']}/messages")
    assert response.status_code == 200
    assert [(m["content"], m["user"]["username"]) for m in response.json()] == [
        ("thanks", "bob"),
        ("welcome", "alice"),
    ]


@pytest.mark.asyncio
async def test_message_delete_permissions(make_client):
    alice_client, bob_client = make_client(), make_client()
    await register(alice_client, "alice")
    bob = await register(bob_client, "bob")
    team = await create_team(alice_client)
    await add_member(alice_client, team["id"], bob["id"])

    by_alice = (await alice_client.post(f"{API}/teams/{team['id']}/messages", json={"content": "a"})).json()
    by_bob = (await bob_client.post(f"{API}/teams/{team['id']}/messages", json={"content": "b"})).json()

    assert (await bob_client.delete(f"{API}/messages/{by_alice['id']}")).status_code == 403
    response = await bob_client.delete(f"{API}/messages/{by_bob['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Message deleted successfully"}
    assert (await alice_client.delete(f"{API}/messages/{by_alice['id']}")).status_code == 200
    assert (await alice_client.delete(f"{API}/messages/{by_alice['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_messages_of_unknown_team(async_client):
    await register(async_client, "alice")
    response = await async_client.get(f"{API}/teams/999/messages")
    assert response.status_code == 404
