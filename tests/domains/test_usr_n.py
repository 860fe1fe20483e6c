# tests/domains/test_usr_n.py

"""
'usr' 도메인 (인증 및 사용자 관리) 관련 API 엔드포인트에 대한 통합 테스트 모듈입니다.
"""

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from fastapi import status

from app.domains.usr import models as usr_models
from app.domains.usr import crud as usr_crud
from app.domains.usr import schemas as usr_schemas


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트 테스트
# =============================================================================
@pytest.mark.asyncio
async def test_login_for_access_token_success(
    client: AsyncClient,
    test_factory_user: usr_models.User,
):
    """올바른 ID와 비밀번호로 액세스 토큰을 발급받는지 테스트합니다."""
    response = await client.post(
        "/api/v1/usr/auth/token",
        data={"username": "factory", "password": "factorypass123"},
    )

    assert response.status_code == 200
    response_data = response.json()
    assert "access_token" in response_data
    assert response_data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_for_access_token_wrong_password(
    client: AsyncClient,
    test_factory_user: usr_models.User,
):
    """잘못된 비밀번호로 로그인 시도 시 401을 받는지 테스트합니다."""
    response = await client.post(
        "/api/v1/usr/auth/token",
        data={"username": "factory", "password": "wrong_password"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect username or password"


@pytest.mark.asyncio
async def test_login_for_access_token_inactive_user(
    client: AsyncClient,
    user_factory,
):
    """비활성 사용자의 로그인 시도는 400 BAD REQUEST 입니다."""
    await user_factory("sleeper", "sleeperpass123", role=usr_models.UserRole.OFFICE, is_active=False)

    response = await client.post(
        "/api/v1/usr/auth/token",
        data={"username": "sleeper", "password": "sleeperpass123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Inactive user"


@pytest.mark.asyncio
async def test_read_users_me(office_client: AsyncClient):
    """'/auth/me'가 현재 사용자의 정보를 반환하는지 테스트합니다."""
    response = await office_client.get("/api/v1/usr/auth/me")

    assert response.status_code == 200
    me = response.json()
    assert me["user_id"] == "office"
    assert me["role"] == usr_models.UserRole.OFFICE
    assert "password_hash" not in me


@pytest.mark.asyncio
async def test_read_users_me_unauthenticated(client: AsyncClient):
    response = await client.get("/api/v1/usr/auth/me")
    assert response.status_code == 401


# =============================================================================
# 2. 사용자 (User) 관리 엔드포인트 테스트
# =============================================================================
@pytest.mark.asyncio
async def test_create_user_success_admin(admin_client: AsyncClient):
    """관리자 권한으로 공장 담당자 계정을 생성하는지 테스트합니다."""
    user_data = {
        "user_id": "operator1",
        "email": "operator1@example.com",
        "name": "Line Operator",
        "role": usr_models.UserRole.FACTORY,
        "password": "operatorpass123",
    }
    response = await admin_client.post("/api/v1/usr/users", json=user_data)

    assert response.status_code == status.HTTP_201_CREATED
    created = response.json()
    assert created["user_id"] == "operator1"
    assert created["role"] == usr_models.UserRole.FACTORY
    assert "password" not in created


@pytest.mark.asyncio
async def test_create_user_duplicate_user_id(admin_client: AsyncClient):
    """이미 존재하는 로그인 ID로는 사용자를 만들 수 없습니다."""
    response = await admin_client.post(
        "/api/v1/usr/users",
        json={"user_id": "sysadm", "password": "anotherpass123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User ID already registered"


@pytest.mark.asyncio
async def test_create_user_forbidden_for_office(office_client: AsyncClient):
    """사무실 사용자는 사용자를 생성할 수 없습니다. (403)"""
    response = await office_client.post(
        "/api/v1/usr/users",
        json={"user_id": "intruder", "password": "intruderpass123"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_read_users_non_admin_sees_only_self(factory_client: AsyncClient):
    response = await factory_client.get("/api/v1/usr/users")

    assert response.status_code == 200
    users = response.json()
    assert [u["user_id"] for u in users] == ["factory"]


@pytest.mark.asyncio
async def test_update_user_role_admin(
    admin_client: AsyncClient,
    db_session: AsyncSession,
):
    """관리자가 사용자 역할과 활성 상태를 변경하는지 테스트합니다."""
    target = await usr_crud.user.create(
        db_session,
        obj_in=usr_schemas.UserCreate(user_id="temp", password="temppass1234"),
    )
    target_id = target.id

    response = await admin_client.put(
        f"/api/v1/usr/users/{target_id}",
        json={"role": usr_models.UserRole.FACTORY, "is_active": False},
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["role"] == usr_models.UserRole.FACTORY
    assert updated["is_active"] is False


@pytest.mark.asyncio
async def test_update_user_not_found(admin_client: AsyncClient):
    response = await admin_client.put("/api/v1/usr/users/999999", json={"name": "Nobody"})
    assert response.status_code == 404
