"""Shared fixtures: a fake requests session and a ready-made configuration."""

from unittest.mock import MagicMock

import pytest

from railway_config import Config


@pytest.fixture
def session():
    fake = MagicMock()
    fake.post.side_effect = AssertionError("unexpected HTTP call")
    return fake


@pytest.fixture
def config():
    return Config(
        api_token="tok-secret",
        service_ids=("svc-1", "svc-2", "svc-3"),
        project_id="proj-1",
        environment_id="env-1",
        api_url="https://railway.test/graphql/v2",
    )


@pytest.fixture
def environ():
    return {
        "RAILWAY_API_TOKEN": "tok-secret",
        "SERVICE_IDS": "svc-1,svc-2",
        "PROJECT_ID": "proj-1",
        "ENVIRONMENT_ID": "env-1",
        "RAILWAY_API_URL": "https://railway.test/graphql/v2",
    }
