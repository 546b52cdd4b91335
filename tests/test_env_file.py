"""Unit tests for .env loading and classification."""

from unittest.mock import Mock

import pytest

from src.core.env_file import (
    EnvEntry,
    EnvFileError,
    ensure_env_file,
    is_secret_key,
    load_env_entries,
)


ENV_CONTENT = """# Project variables
DATABASE_URL=postgresql://localhost:5432/myapp
JWT_SECRET=jwt-value
api_key=lower-case-key
DB_PASSWORD="quoted password"

DEBUG=false
export REGION_NAME=eu-west-1
PRIVATE_PEM=line1\\nline2
NOVALUE
"""


@pytest.fixture
def env_path(tmp_path):
    path = tmp_path / ".env"
    path.write_text(ENV_CONTENT)
    return path


class TestIsSecretKey:
    """Test cases for secret name detection."""

    @pytest.mark.parametrize(
        "key",
        ["JWT_SECRET", "API_KEY", "DB_PASSWORD", "api_key", "SecretToken", "KEYSTORE"],
    )
    def test_sensitive_names(self, key):
        assert is_secret_key(key) is True

    @pytest.mark.parametrize("key", ["DATABASE_URL", "DEBUG", "REGION_NAME", "PORT"])
    def test_plain_names(self, key):
        assert is_secret_key(key) is False


class TestLoadEnvEntries:
    """Test cases for load_env_entries."""

    def test_entries_in_file_order(self, env_path):
        entries = load_env_entries(str(env_path))

        assert [entry.key for entry in entries] == [
            "DATABASE_URL",
            "JWT_SECRET",
            "api_key",
            "DB_PASSWORD",
            "DEBUG",
            "REGION_NAME",
            "PRIVATE_PEM",
        ]

    def test_classification(self, env_path):
        entries = {entry.key: entry for entry in load_env_entries(str(env_path))}

        assert entries["DATABASE_URL"] == EnvEntry(
            "DATABASE_URL", "postgresql://localhost:5432/myapp", False
        )
        assert entries["JWT_SECRET"].is_secret is True
        assert entries["api_key"].is_secret is True
        assert entries["DB_PASSWORD"].is_secret is True
        assert entries["DB_PASSWORD"].value == "quoted password"
        assert entries["DEBUG"].is_secret is False

    def test_classification_matches_name_rule(self, env_path):
        for entry in load_env_entries(str(env_path)):
            assert entry.is_secret == is_secret_key(entry.key)

    def test_everything_secret_without_variable_support(self, env_path):
        entries = load_env_entries(str(env_path), supports_variables=False)

        assert entries
        assert all(entry.is_secret for entry in entries)

    def test_escaped_newlines_expanded(self, env_path):
        entries = {entry.key: entry for entry in load_env_entries(str(env_path))}

        assert entries["PRIVATE_PEM"].value == "line1\nline2"

    def test_key_without_value_skipped(self, env_path):
        keys = [entry.key for entry in load_env_entries(str(env_path))]

        assert "NOVALUE" not in keys

    def test_missing_file(self, tmp_path):
        with pytest.raises(EnvFileError) as exc_info:
            load_env_entries(str(tmp_path / ".env"))

        assert "file not found" in str(exc_info.value)

    def test_empty_file(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("# nothing here\n")

        assert load_env_entries(str(path)) == []


class TestEnsureEnvFile:
    """Test cases for ensure_env_file."""

    def test_existing_file_kept(self, env_path, tmp_path):
        result = ensure_env_file(str(env_path), str(tmp_path / ".env.example"))

        assert result == env_path
        assert env_path.read_text() == ENV_CONTENT

    def test_created_from_example(self, tmp_path):
        example = tmp_path / ".env.example"
        example.write_text("DEBUG=true\n")
        safety = Mock()

        result = ensure_env_file(str(tmp_path / ".env"), str(example), safety)

        assert result.read_text() == "DEBUG=true\n"
        safety.pause.assert_called_once()

    def test_no_file_and_no_example(self, tmp_path):
        with pytest.raises(EnvFileError):
            ensure_env_file(str(tmp_path / ".env"), str(tmp_path / ".env.example"))
