"""
Tests for the team-scoped authorization helpers.
"""
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from teamflow.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from teamflow.models.team import TeamRole
from teamflow.schemas.project import ProjectCreate
from teamflow.schemas.task import TaskCreate
from teamflow.schemas.team import TeamCreate
from teamflow.schemas.user import UserRegister
from teamflow.services.access import (
    ensure_other_admin,
    get_task_or_404,
    get_task_team_id,
    require_assignable,
    require_author_or_admin,
    require_membership,
    role_at_least,
)


async def make_user(storage, username):
    return await storage.create_user(
        UserRegister(username=username, password="secret123", email=f"{username}@mail.com", full_name=username),
        password_hash="hashed",
    )


@pytest_asyncio.fixture
async def team_setup(storage):
    admin = await make_user(storage, "alice")
    member = await make_user(storage, "bob")
    guest = await make_user(storage, "gus")
    outsider = await make_user(storage, "mallory")
    team = await storage.create_team(TeamCreate(name="Eng"), admin.id)
    await storage.add_team_member(team.id, member.id, TeamRole.MEMBER)
    await storage.add_team_member(team.id, guest.id, TeamRole.GUEST)
    return team, admin, member, guest, outsider


def test_role_ranking():
    assert role_at_least(TeamRole.ADMIN, TeamRole.MEMBER)
    assert role_at_least(TeamRole.MEMBER, TeamRole.MEMBER)
    assert not role_at_least(TeamRole.GUEST, TeamRole.MEMBER)
    assert not role_at_least(TeamRole.MEMBER, TeamRole.ADMIN)


@pytest.mark.asyncio
async def test_require_membership(storage, team_setup):
    team, admin, member, guest, outsider = team_setup

    assert (await require_membership(storage, admin, team.id)).role == TeamRole.ADMIN
    assert (await require_membership(storage, guest, team.id)).role == TeamRole.GUEST
    with pytest.raises(AuthorizationError):
        await require_membership(storage, outsider, team.id)


@pytest.mark.asyncio
async def test_require_membership_min_role(storage, team_setup):
    team, admin, member, guest, _ = team_setup

    await require_membership(storage, admin, team.id, TeamRole.ADMIN)
    await require_membership(storage, member, team.id, TeamRole.MEMBER)
    with pytest.raises(AuthorizationError):
        await require_membership(storage, member, team.id, TeamRole.ADMIN)
    with pytest.raises(AuthorizationError) as exc_info:
        await require_membership(storage, guest, team.id, TeamRole.MEMBER, "Not authorized to edit")
    assert exc_info.value.message == "Not authorized to edit"
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_require_author_or_admin(storage, team_setup):
    team, admin, member, guest, outsider = team_setup

    await require_author_or_admin(storage, member, team.id, author_id=member.id)
    await require_author_or_admin(storage, admin, team.id, author_id=member.id)
    with pytest.raises(AuthorizationError):
        await require_author_or_admin(storage, guest, team.id, author_id=member.id)
    with pytest.raises(AuthorizationError):
        await require_author_or_admin(storage, outsider, team.id, author_id=member.id)


@pytest.mark.asyncio
async def test_task_resolves_to_team(storage, team_setup):
    team, *_ = team_setup
    project = await storage.create_project(
        ProjectCreate(name="Site", team_id=team.id, start_date=datetime(2026, 1, 1, tzinfo=timezone.utc))
    )
    task = await storage.create_task(TaskCreate(title="t", project_id=project.id))

    assert await get_task_team_id(storage, task) == team.id
    with pytest.raises(NotFoundError):
        await get_task_or_404(storage, 999)


@pytest.mark.asyncio
async def test_require_assignable(storage, team_setup):
    team, admin, member, guest, outsider = team_setup

    await require_assignable(storage, team.id, None)
    await require_assignable(storage, team.id, guest.id)
    with pytest.raises(NotFoundError):
        await require_assignable(storage, team.id, 999)
    with pytest.raises(ValidationError):
        await require_assignable(storage, team.id, outsider.id)


@pytest.mark.asyncio
async def test_ensure_other_admin(storage, team_setup):
    team, admin, member, *_ = team_setup

    await ensure_other_admin(storage, team.id, member.id)
    with pytest.raises(ValidationError):
        await ensure_other_admin(storage, team.id, admin.id)

    await storage.update_team_member_role(team.id, member.id, TeamRole.ADMIN)
    await ensure_other_admin(storage, team.id, admin.id)
