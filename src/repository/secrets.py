"""GitHub secrets and variables upload.

This module uploads the project .env entries to GitHub environments and
the repository, and stores the AWS deployment credentials taken from
the configuration file.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from src.core.config import Configuration
from src.core.env_file import EnvEntry
from src.core.github_client import GitHubCLI


logger = logging.getLogger(__name__)


class SecretUploadError(Exception):
    """Raised when the upload target is invalid."""
    pass


class UploadTarget(Enum):
    """Where .env entries are uploaded."""

    ALL_ENVIRONMENTS = "environments"
    SINGLE_ENVIRONMENT = "environment"
    REPOSITORY = "repository"
    BOTH = "both"


MENU_CHOICES = {
    "1": UploadTarget.ALL_ENVIRONMENTS,
    "2": UploadTarget.SINGLE_ENVIRONMENT,
    "3": UploadTarget.REPOSITORY,
    "4": UploadTarget.BOTH,
}


class SecretUploader:
    """Uploads classified .env entries as GitHub secrets or variables."""

    def __init__(self, config: Configuration, github: GitHubCLI) -> None:
        """Initialize uploader.

        Args:
            config: Loaded project configuration
            github: GitHub CLI wrapper for the configured repository
        """
        self.config = config
        self.github = github

    def upload_to_scope(self, entries: List[EnvEntry],
                        env: Optional[str] = None) -> Dict[str, int]:
        """Upload entries to one environment or to the repository.

        Args:
            entries: Classified .env entries
            env: Environment name; repository level when None

        Returns:
            Dictionary with 'secrets' and 'variables' counts

        Raises:
            GitHubCLIError: When gh rejects an entry
        """
        label = f"environment: {env}" if env else "repository"
        print(f"Adding variables to {label}")

        counts = {"secrets": 0, "variables": 0}
        for entry in entries:
            if entry.is_secret:
                print(f"  Adding secret: {entry.key}")
                self.github.set_secret(entry.key, entry.value, env=env)
                counts["secrets"] += 1
            else:
                print(f"  Adding variable: {entry.key}")
                self.github.set_variable(entry.key, entry.value, env=env)
                counts["variables"] += 1

        print(
            f"✅ Added {counts['secrets']} secrets and "
            f"{counts['variables']} variables to {env or 'repository'}"
        )
        return counts

    def upload(self, entries: List[EnvEntry], target: UploadTarget,
               environment: Optional[str] = None) -> Dict[str, Dict[str, int]]:
        """Upload entries to the selected target.

        Args:
            entries: Classified .env entries
            target: Upload target
            environment: Environment name for SINGLE_ENVIRONMENT

        Returns:
            Counts per scope ('repository' or environment name)

        Raises:
            SecretUploadError: When the selected environment is not configured
        """
        environments = self.config.get_environments()
        results: Dict[str, Dict[str, int]] = {}

        if target == UploadTarget.SINGLE_ENVIRONMENT:
            if environment not in environments:
                raise SecretUploadError(
                    f"Invalid environment name '{environment}'. "
                    f"Available environments: {' '.join(environments)}"
                )
            results[environment] = self.upload_to_scope(entries, env=environment)
            return results

        if target in (UploadTarget.REPOSITORY, UploadTarget.BOTH):
            results["repository"] = self.upload_to_scope(entries)

        if target in (UploadTarget.ALL_ENVIRONMENTS, UploadTarget.BOTH):
            for env in environments:
                results[env] = self.upload_to_scope(entries, env=env)

        return results

    def prompt_target(self) -> UploadTarget:
        """Ask the user where to upload.

        Raises:
            SecretUploadError: On an invalid menu choice
        """
        print()
        print("Choose an option:")
        print("1. Add variables/secrets to all environments")
        print("2. Add variables/secrets to specific environment")
        print("3. Add variables/secrets as repository-level")
        print("4. Add variables/secrets to both environments and repository level")
        choice = input("Enter your choice (1-4): ").strip()

        if choice not in MENU_CHOICES:
            raise SecretUploadError("Invalid choice!")
        return MENU_CHOICES[choice]

    def prompt_environment(self) -> str:
        print(f"Available environments: {' '.join(self.config.get_environments())}")
        return input("Enter environment name: ").strip()


class DeploymentSecretsManager:
    """Stores the AWS deployment credentials as repository secrets."""

    def __init__(self, config: Configuration, github: GitHubCLI) -> None:
        self.config = config
        self.github = github

    def describe(self) -> None:
        """Print the deployment secrets the workflow expects."""
        key_name = self.config.get_key_name()
        print("The following secrets need to be added to GitHub:")
        print("1. AWS_ACCESS_KEY_ID (your AWS access key)")
        print("2. AWS_SECRET_ACCESS_KEY (your AWS secret key)")
        print(f"3. EC2_KEY_NAME (will be created: {key_name})")
        print("4. EC2_PRIVATE_KEY (will be created by infrastructure setup)")
        print()

    def upload_aws_credentials(self) -> bool:
        """Set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY from config.

        Returns:
            True if both secrets were set, False when credentials are placeholders

        Raises:
            GitHubCLIError: When gh rejects a secret
        """
        print("Getting AWS credentials from config.json...")
        if not self.config.has_deployment_credentials():
            print("⚠️ AWS credentials not found or are placeholder values in config.json")
            print(
                "Please update config.json with your actual AWS credentials and "
                "run the setup again, or add them manually:"
            )
            print("gh secret set AWS_ACCESS_KEY_ID --body 'your_aws_access_key'")
            print("gh secret set AWS_SECRET_ACCESS_KEY --body 'your_aws_secret_key'")
            return False

        credentials = self.config.get_aws_credentials()
        self.github.set_secret("AWS_ACCESS_KEY_ID", credentials["access_key_id"])
        print("✅ AWS_ACCESS_KEY_ID added")
        self.github.set_secret("AWS_SECRET_ACCESS_KEY", credentials["secret_access_key"])
        print("✅ AWS_SECRET_ACCESS_KEY added")
        logger.info("AWS deployment credentials stored in %s", self.github.repository)
        return True
