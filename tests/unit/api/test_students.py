import pytest
from httpx import AsyncClient

from tests.conftest import headers_for

BASE = "/api/v1/students"


@pytest.mark.asyncio
async def test_student_reads_own_profile(client: AsyncClient, student_user, student_profile):
    response = await client.get(f"{BASE}/{student_profile.id}", headers=headers_for(student_user))

    assert response.status_code == 200
    assert response.json()["register_id"] == "22EC1A0501"
    assert response.json()["department"] == "CSE"


@pytest.mark.asyncio
async def test_student_updates_own_phone(client: AsyncClient, student_user, student_profile):
    response = await client.patch(
        f"{BASE}/{student_profile.id}", json={"phone": "9876543210"}, headers=headers_for(student_user)
    )

    assert response.status_code == 200
    assert response.json()["phone"] == "9876543210"


@pytest.mark.asyncio
async def test_invalid_phone_rejected(client: AsyncClient, student_user, student_profile):
    response = await client.patch(
        f"{BASE}/{student_profile.id}", json={"phone": "12345"}, headers=headers_for(student_user)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_student_cannot_change_mentor(client: AsyncClient, student_user, student_profile, faculty_user):
    response = await client.patch(
        f"{BASE}/{student_profile.id}", json={"mentor_id": str(faculty_user.id)}, headers=headers_for(student_user)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_hod_assigns_mentor(client: AsyncClient, hod_user, student_profile, faculty_user):
    response = await client.patch(
        f"{BASE}/{student_profile.id}", json={"mentor_id": str(faculty_user.id)}, headers=headers_for(hod_user)
    )

    assert response.status_code == 200
    assert response.json()["mentor_id"] == str(faculty_user.id)


@pytest.mark.asyncio
async def test_other_student_cannot_edit(client: AsyncClient, make_user, student_profile):
    from campusdesk.models.user import UserRole
    other = await make_user(UserRole.STUDENT)

    response = await client.patch(
        f"{BASE}/{student_profile.id}", json={"class_name": "CSE-B"}, headers=headers_for(other)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_student(client: AsyncClient, hod_user):
    response = await client.get(f"{BASE}/missing", headers=headers_for(hod_user))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "STUDENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_student_cannot_clear_mentor(client: AsyncClient, hod_user, student_user, student_profile, faculty_user):
    await client.patch(
        f"{BASE}/{student_profile.id}", json={"mentor_id": str(faculty_user.id)}, headers=headers_for(hod_user)
    )

    response = await client.patch(
        f"{BASE}/{student_profile.id}", json={"mentor_id": None}, headers=headers_for(student_user)
    )

    assert response.status_code == 403
    profile = await client.get(f"{BASE}/{student_profile.id}", headers=headers_for(hod_user))
    assert profile.json()["mentor_id"] == str(faculty_user.id)


@pytest.mark.asyncio
async def test_hod_clears_mentor(client: AsyncClient, hod_user, student_profile, faculty_user):
    headers = headers_for(hod_user)
    await client.patch(f"{BASE}/{student_profile.id}", json={"mentor_id": str(faculty_user.id)}, headers=headers)

    response = await client.patch(f"{BASE}/{student_profile.id}", json={"mentor_id": None}, headers=headers)

    assert response.status_code == 200
    assert response.json()["mentor_id"] is None


@pytest.mark.asyncio
async def test_null_full_name_is_422(client: AsyncClient, student_user, student_profile):
    response = await client.patch(
        f"{BASE}/{student_profile.id}", json={"full_name": None}, headers=headers_for(student_user)
    )

    assert response.status_code == 422
