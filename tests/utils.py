import random
import string
from typing import Any, Dict

import httpx

API = "/api"
DEFAULT_PASSWORD = "secret123"


def random_string(length: int = 10) -> str:
    """Генерирует случайную строку заданной длины."""
    return "".join(random.choices(string.ascii_lowercase, k=length))


def random_email() -> str:
    """Генерирует случайный email."""
    return f"{random_string(8)}@{random_string(6)}.com"


async def register(client: httpx.AsyncClient, username: str = None, password: str = DEFAULT_PASSWORD) -> Dict[str, Any]:
    """Регистрирует пользователя; cookie сессии остается в клиенте."""
    username = username or random_string()
    response = await client.post(
        f"{API}/auth/register",
        json={
            "username": username,
            "password": password,
            "email": f"{username}@mail.com",
            "fullName": username.capitalize(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_team(client: httpx.AsyncClient, name: str = "Eng") -> Dict[str, Any]:
    response = await client.post(f"{API}/teams", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()


async def add_member(client: httpx.AsyncClient, team_id: int, user_id: int, role: str = "member") -> Dict[str, Any]:
    response = await client.post(f"{API}/teams/{team_id}/members", json={"userId": user_id, "role": role})
    assert response.status_code == 201, response.text
    return response.json()


async def create_project(client: httpx.AsyncClient, team_id: int, name: str = "Site Redesign") -> Dict[str, Any]:
    response = await client.post(
        f"{API}/projects",
        json={"name": name, "teamId": team_id, "startDate": "2026-01-05T09:00:00Z"},
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_task(client: httpx.AsyncClient, project_id: int, title: str = "Task", **fields) -> Dict[str, Any]:
    response = await client.post(f"{API}/tasks", json={"title": title, "projectId": project_id, **fields})
    assert response.status_code == 201, response.text
    return response.json()
