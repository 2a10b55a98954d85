"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating (approved) test users.
  - ``auth_header`` fixture for authenticated requests (JWT).
  - ``role`` fixture resolving a seeded role by name.
  - an autouse fixture that sends uploads to a temporary ``MEDIA_ROOT``.
"""

from __future__ import annotations

import io

import pytest
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _isolated_media_root(settings, tmp_path):
    """Evidence attachments are written under ``tmp_path``, never the repo."""
    settings.MEDIA_ROOT = tmp_path / "media"


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Users are ``ACTIVE`` (approved) unless ``status`` is given.

    Usage::

        def test_something(create_user):
            officer = create_user(username="alice")
            pending = create_user(username="bob", status=UserStatus.PENDING)
    """
    from accounts.models import User, UserStatus

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        national_id: str | None = None,
        phone_number: str | None = None,
        role=None,
        status: str = UserStatus.ACTIVE,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"
        if national_id is None:
            national_id = f"{_counter:010d}"
        if phone_number is None:
            phone_number = f"0912{_counter:07d}"

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            national_id=national_id,
            phone_number=phone_number,
            role=role,
            status=status,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def role(db):
    """
    Seed the default roles once and return a lookup by name.

    Usage::

        def test_admin(role, create_user):
            admin = create_user(role=role("System Admin"))
    """
    from django.core.management import call_command

    from accounts.models import Role

    call_command("setup_rbac", stdout=io.StringIO())

    def _get(name: str) -> Role:
        return Role.objects.get(name=name)

    return _get


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper function that creates a user and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(username="alice")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/core/dashboard/")
            assert resp.status_code != 401

    The returned dict looks like::

        {"Authorization": "Bearer eyJ..."}
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(
        *,
        username: str | None = None,
        role=None,
        **user_kwargs,
    ) -> dict[str, str]:
        user = create_user(username=username, role=role, **user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
