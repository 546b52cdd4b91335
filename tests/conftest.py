"""Shared fixtures for the setup tool tests."""

import copy
import json

import pytest

from src.core.config import Configuration


VALID_CONFIG = {
    "project": {"name": "shopfront"},
    "aws": {
        "region": "us-west-2",
        "credentials": {
            "access_key_id": "AKIAEXAMPLEKEY",
            "secret_access_key": "secret-example",
        },
    },
    "environments": ["dev", "hml", "prd"],
    "infrastructure": {
        "frontend": {
            "domain": {
                "dev": "dev.shopfront.io",
                "hml": "hml.shopfront.io",
                "prd": "shopfront.io",
            }
        },
        "backend": {
            "domain": {
                "dev": "api.dev.shopfront.io",
                "hml": "api.hml.shopfront.io",
                "prd": "api.shopfront.io",
            },
            "instance_type": {"dev": "t3.micro", "prd": "t3.medium"},
            "load_balancer": {"dev": False, "prd": True},
        },
    },
    "github": {"repository": "acme/shopfront"},
}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep overrides from the developer's shell out of the tests."""
    for name in ("AWS_REGION", "AWS_PROFILE", "GITHUB_REPOSITORY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_data():
    return copy.deepcopy(VALID_CONFIG)


@pytest.fixture
def write_config(tmp_path):
    """Write a configuration dict to config.json and return its path."""

    def _write(data, name="config.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def config(write_config, config_data):
    return Configuration(str(write_config(config_data)))
