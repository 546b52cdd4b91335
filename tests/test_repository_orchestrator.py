"""Unit tests for the repository setup orchestrator."""

from unittest.mock import Mock, patch

import pytest

from src.core.aws_client import AWSClientManager
from src.core.github_client import GitHubCLI
from src.core.safety import SafetyManager
from src.core.validator import PrerequisitesValidator
from src.repository.orchestrator import (
    RepositorySetupError,
    RepositorySetupOrchestrator,
)
from src.repository.secrets import UploadTarget


@pytest.fixture
def github():
    github = Mock(spec=GitHubCLI)
    github.repository = "acme/shopfront"
    github.supports_variables.return_value = True
    return github


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("DEBUG=false\nJWT_SECRET=jwt\n")
    return path


def _ready_validator(ready=True):
    validator = Mock(spec=PrerequisitesValidator)
    validator.validate_all.return_value = []
    validator.is_ready.return_value = ready
    return validator


class TestRepositorySetupOrchestrator:
    """Test cases for RepositorySetupOrchestrator."""

    def _orchestrator(self, config, github, env_file, safety=None, **kwargs):
        return RepositorySetupOrchestrator(
            config,
            Mock(spec=AWSClientManager),
            github,
            safety or SafetyManager(enable_confirmations=False),
            env_file=str(env_file),
            **kwargs,
        )

    def test_build_validator_checks(self, config, github, env_file):
        validator = self._orchestrator(config, github, env_file).build_validator()

        assert [v.name for v in validator.validators] == [
            "Required Tools",
            "GitHub CLI Authentication",
            "AWS Credentials",
            "Route53 Hosted Zones",
        ]

    def test_run_non_interactive(self, config, github, env_file):
        orchestrator = self._orchestrator(config, github, env_file)

        with patch.object(orchestrator, "build_validator", return_value=_ready_validator()):
            results = orchestrator.run()

        assert results["status"] == "SUCCESS"
        assert results["steps_completed"] == [
            "configuration",
            "prerequisites",
            "env_file",
            "github_environments",
            "deployment_secrets",
            "env_upload",
        ]
        assert results["environments"]["created"] == ["dev", "hml", "prd"]
        # Non-interactive runs upload to every environment
        assert list(results["uploads"]) == ["dev", "hml", "prd"]
        github.set_secret.assert_any_call("AWS_ACCESS_KEY_ID", "AKIAEXAMPLEKEY")
        github.set_secret.assert_any_call("JWT_SECRET", "jwt", env="prd")
        github.set_variable.assert_any_call("DEBUG", "false", env="dev")

    def test_prerequisites_failure(self, config, github, env_file):
        orchestrator = self._orchestrator(config, github, env_file)

        with patch.object(orchestrator, "build_validator", return_value=_ready_validator(False)):
            with pytest.raises(RepositorySetupError):
                orchestrator.run()

        github.create_environment.assert_not_called()

    def test_declined_uploads(self, config, github, env_file):
        safety = Mock(spec=SafetyManager)
        safety.confirm.return_value = False
        orchestrator = self._orchestrator(config, github, env_file, safety=safety)

        with patch.object(orchestrator, "build_validator", return_value=_ready_validator()):
            results = orchestrator.run()

        assert results["status"] == "SUCCESS"
        assert "deployment_secrets" not in results["steps_completed"]
        assert "env_upload" not in results["steps_completed"]
        github.set_secret.assert_not_called()

    def test_upload_preselected_repository(self, config, github, env_file):
        orchestrator = self._orchestrator(
            config, github, env_file, upload_target=UploadTarget.REPOSITORY
        )

        counts = orchestrator.upload_env_file()

        assert counts == {"repository": {"secrets": 1, "variables": 1}}

    def test_upload_without_variable_support(self, config, github, env_file):
        github.supports_variables.return_value = False
        orchestrator = self._orchestrator(
            config, github, env_file,
            upload_target=UploadTarget.SINGLE_ENVIRONMENT, upload_environment="dev",
        )

        counts = orchestrator.upload_env_file()

        assert counts == {"dev": {"secrets": 2, "variables": 0}}
        github.set_variable.assert_not_called()

    def test_interactive_upload_prompts_for_target(self, config, github, env_file):
        orchestrator = self._orchestrator(config, github, env_file, safety=SafetyManager())

        with patch("builtins.input", side_effect=["2", "hml"]):
            counts = orchestrator.upload_env_file()

        assert list(counts) == ["hml"]
