"""Repository and environment setup orchestration.

This module provides the RepositorySetupOrchestrator class which runs
the repository setup sequence: configuration check, prerequisites,
hosted zones, .env file, GitHub environments, deployment secrets and
the .env upload.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.core.aws_client import AWSClientManager
from src.core.config import Configuration
from src.core.env_file import ensure_env_file, load_env_entries, EXAMPLE_ENV_FILE
from src.core.github_client import GitHubCLI
from src.core.safety import SafetyManager
from src.core.validator import (
    CredentialsValidator,
    GitHubAuthValidator,
    PrerequisitesValidator,
    ToolsValidator,
)
from src.repository.environments import GitHubEnvironmentManager
from src.repository.secrets import (
    DeploymentSecretsManager,
    SecretUploader,
    UploadTarget,
)
from src.repository.validators import HostedZoneValidator


logger = logging.getLogger(__name__)


class RepositorySetupError(Exception):
    """Raised when repository setup fails."""
    pass


class RepositorySetupOrchestrator:
    """Orchestrates GitHub repository setup for the configured project."""

    def __init__(
        self,
        config: Configuration,
        aws_client: AWSClientManager,
        github: GitHubCLI,
        safety: SafetyManager,
        env_file: str = ".env",
        upload_target: Optional[UploadTarget] = None,
        upload_environment: Optional[str] = None,
    ) -> None:
        """Initialize the repository setup orchestrator.

        Args:
            config: Loaded project configuration
            aws_client: AWS client manager (credentials and Route53 checks)
            github: GitHub CLI wrapper for the configured repository
            safety: Confirmation manager
            env_file: Path to the project .env file
            upload_target: Preselected .env upload target; prompts when None
            upload_environment: Environment for UploadTarget.SINGLE_ENVIRONMENT
        """
        self.config = config
        self.aws_client = aws_client
        self.github = github
        self.safety = safety
        self.env_file = env_file
        self.upload_target = upload_target
        self.upload_environment = upload_environment

        self.environment_manager = GitHubEnvironmentManager(config, github)
        self.secret_uploader = SecretUploader(config, github)
        self.deployment_secrets = DeploymentSecretsManager(config, github)

    def build_validator(self) -> PrerequisitesValidator:
        return PrerequisitesValidator([
            ToolsValidator(["gh"]),
            GitHubAuthValidator(self.github, required=True),
            CredentialsValidator(self.aws_client),
            HostedZoneValidator(self.aws_client, self.config),
        ])

    def run(self) -> Dict[str, Any]:
        """Run the complete repository setup.

        Returns:
            Dictionary with status, completed steps and upload counts

        Raises:
            RepositorySetupError: When a step fails
        """
        results: Dict[str, Any] = {
            'status': 'FAILED',
            'steps_completed': [],
            'environments': {},
            'uploads': {},
        }
        steps: List[str] = results['steps_completed']

        print("🚀 Starting Repository & Environment Setup...")

        print("\n📋 Step 1: Checking configuration...")
        self._check_configuration()
        steps.append('configuration')

        print("\n🔍 Step 2: Validating prerequisites...")
        self._validate_prerequisites()
        steps.append('prerequisites')

        print("\n📄 Step 3: Setting up .env file...")
        env_path = Path(self.env_file)
        ensure_env_file(str(env_path), str(env_path.parent / EXAMPLE_ENV_FILE), self.safety)
        steps.append('env_file')

        print("\n🏗️  Step 4: Setting up GitHub environments...")
        results['environments'] = self.environment_manager.setup_environments()
        steps.append('github_environments')

        print("\n🔐 Step 5: Setting up deployment secrets...")
        self.deployment_secrets.describe()
        if self.safety.confirm("Do you want to add AWS secrets now?"):
            if self.deployment_secrets.upload_aws_credentials():
                print("✅ AWS secrets added successfully!")
                steps.append('deployment_secrets')
        else:
            print("⚠️ AWS secrets not added. Please add them manually before deploying.")

        print("\n📤 Step 6: Uploading project variables/secrets...")
        environments = " ".join(self.config.get_environments())
        print(f"Note: This uploads the variables from {self.env_file} to GitHub ({environments})")
        if self.safety.confirm(
            f"Would you like to upload project variables/secrets from {self.env_file} to GitHub now?"
        ):
            results['uploads'] = self.upload_env_file()
            steps.append('env_upload')
        else:
            print("⚠️ Skipped secrets upload. You can run this manually later or add secrets via GitHub UI.")

        results['status'] = 'SUCCESS'
        self.show_next_steps()
        return results

    def _check_configuration(self) -> None:
        print(f"✅ {self.config.path} is valid")
        if not self.config.has_deployment_credentials():
            print("⚠️ AWS credentials appear to be placeholder values in config.json")
            print("   You'll need to add real AWS credentials before deployment")

    def _validate_prerequisites(self) -> None:
        validator = self.build_validator()
        results = validator.validate_all()
        validator.report(results)

        if not validator.is_ready(results):
            raise RepositorySetupError(
                "Prerequisites validation failed. Please address the issues above."
            )
        print("✅ All prerequisites met")

    def upload_env_file(self) -> Dict[str, Dict[str, int]]:
        """Upload .env entries to the selected GitHub target.

        Returns:
            Counts per scope

        Raises:
            EnvFileError: When the .env file is missing
            SecretUploadError: When the target selection is invalid
        """
        supports_variables = self.github.supports_variables()
        if supports_variables:
            print("Variables containing 'SECRET', 'KEY', or 'PASSWORD' → GitHub Secrets")
            print("Other variables → GitHub Environment Variables")
        else:
            print("Your GitHub CLI version doesn't support variables.")
            print("All variables will be stored as GitHub Secrets instead.")
        print("Deployment secrets (AWS credentials, EC2 keys) are handled separately.")

        entries = load_env_entries(self.env_file, supports_variables=supports_variables)

        target = self.upload_target
        environment = self.upload_environment
        if target is None:
            if self.safety.enable_confirmations:
                target = self.secret_uploader.prompt_target()
            else:
                target = UploadTarget.ALL_ENVIRONMENTS
        if target == UploadTarget.SINGLE_ENVIRONMENT and environment is None:
            environment = self.secret_uploader.prompt_environment()

        counts = self.secret_uploader.upload(entries, target, environment)
        print("✅ Secrets setup completed!")
        return counts

    def show_next_steps(self) -> None:
        environments = ", ".join(self.config.get_environments())
        print("\n" + "=" * 60)
        print("Repository Setup Complete! 🎉")
        print("=" * 60)
        print("Next steps:")
        print("1. 🚀 Run infrastructure setup:")
        print("   - fullstack-setup infrastructure")
        print("   - This will create the Terraform backend, EC2 key pair and AWS resources")
        print("2. 📋 After infrastructure setup:")
        print(f"   - Environments: {environments} are configured")
        print("   - Project secrets uploaded to GitHub")
        print("   - Ready for application deployment")
        print("3. 🔧 Configure your application:")
        print("   - Update frontend/ and backend/ directories with your code")
        print("   - Ensure docker-compose.yml is properly configured")
