# tests/conftest.py
"""
Pytest configuration for Django tests.

DJANGO_SETTINGS_MODULE comes from the pytest section of pyproject.toml
(config.settings.test); this file only holds shared fixtures.
"""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username="owner", password="pass-1234")


@pytest.fixture
def other_user(db):
    return get_user_model().objects.create_user(username="intruder", password="pass-1234")


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def make_asset(user):
    """Factory for assets owned by ``user`` unless another owner is passed."""
    from apps.media.models import Asset

    def _make(owner=None, **overrides):
        fields = {
            "public_id": "video-uploads/clip",
            "title": "Clip",
            "kind": "video",
            "original_size": 10 * 1024 * 1024,
            "compressed_size": 4 * 1024 * 1024,
            "duration": 30,
        }
        fields.update(overrides)
        return Asset.objects.create(user=owner or user, **fields)

    return _make
