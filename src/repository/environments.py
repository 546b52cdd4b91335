"""GitHub environment management.

Creates one GitHub environment per configured deployment environment
and applies protection rules to the production-like ones.
"""

import logging
from typing import Any, Dict, List

from src.core.config import Configuration
from src.core.github_client import GitHubCLI, GitHubCLIError


logger = logging.getLogger(__name__)

PROTECTION_RULES: Dict[str, Any] = {
    "wait_timer": 0,
    "prevent_self_review": False,
    "reviewers": [],
    "deployment_branch_policy": {
        "protected_branches": True,
        "custom_branch_policies": False,
    },
}


class GitHubEnvironmentManager:
    """Creates GitHub environments for the configured repository."""

    def __init__(self, config: Configuration, github: GitHubCLI) -> None:
        """Initialize environment manager.

        Args:
            config: Loaded project configuration
            github: GitHub CLI wrapper for the configured repository
        """
        self.config = config
        self.github = github

    def create_environment(self, env_name: str) -> bool:
        """Create a single environment.

        Returns:
            True if the API call succeeded, False if it was reported and skipped
        """
        print(f"Creating environment: {env_name}")
        try:
            self.github.create_environment(env_name)
        except GitHubCLIError as e:
            logger.warning("Environment %s not created: %s", env_name, e)
            print(f"  Environment {env_name} already exists or could not be created")
            return False
        print(f"  ✅ Environment {env_name} ready")
        return True

    def configure_protection(self, env_name: str) -> bool:
        """Apply deployment protection rules.

        Returns:
            True if the rules were applied
        """
        print(f"  Setting protection rules for {env_name} environment...")
        try:
            self.github.configure_protection(env_name, PROTECTION_RULES)
        except GitHubCLIError as e:
            logger.warning("Protection rules for %s skipped: %s", env_name, e)
            print("  ⚠️ Protection rules configuration skipped")
            return False
        print("  ✅ Protection rules configured")
        return True

    def setup_environments(self) -> Dict[str, List[str]]:
        """Create every configured environment.

        Returns:
            Dictionary with 'created', 'skipped' and 'protected' environment lists
        """
        environments = self.config.get_environments()
        protected = self.config.get_protected_environments()

        print(f"Setting up GitHub environments for {self.config.get_project_name()}")
        print(f"Repository: {self.github.repository}")
        print(f"Environments: {' '.join(environments)}")

        summary: Dict[str, List[str]] = {"created": [], "skipped": [], "protected": []}
        for env in environments:
            if self.create_environment(env):
                summary["created"].append(env)
            else:
                summary["skipped"].append(env)

            if env in protected and self.configure_protection(env):
                summary["protected"].append(env)

        print("✅ GitHub environments setup completed!")
        return summary
