"""GitHub CLI wrapper for environments, secrets and variables.

All GitHub interaction goes through the `gh` binary. Secret and variable
values are passed on stdin so they never show up in process listings.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from src.core.command import CommandError, command_exists, run_command


logger = logging.getLogger(__name__)


class GitHubCLIError(Exception):
    """Raised when a GitHub CLI operation fails."""
    pass


class GitHubCLI:
    """Thin wrapper around the GitHub CLI bound to one repository."""

    def __init__(self, repository: str, executable: str = "gh") -> None:
        """Initialize GitHub CLI wrapper.

        Args:
            repository: Repository in owner/repo form
            executable: Name or path of the gh binary
        """
        self.repository = repository
        self.executable = executable
        self._supports_variables: Optional[bool] = None

    def _run(self, args: List[str], input_text: Optional[str] = None):
        return run_command([self.executable] + args, input_text=input_text)

    def is_installed(self) -> bool:
        return command_exists(self.executable)

    def is_authenticated(self) -> bool:
        """Check `gh auth status`.

        Returns:
            True if the CLI is installed and logged in
        """
        if not self.is_installed():
            return False
        try:
            self._run(["auth", "status"])
            return True
        except CommandError:
            return False

    def supports_variables(self) -> bool:
        """Check whether this gh version has the `variable` command.

        Older releases only know about secrets; the result is cached.
        """
        if self._supports_variables is None:
            try:
                self._run(["variable", "--help"])
                self._supports_variables = True
            except CommandError:
                self._supports_variables = False
        return self._supports_variables

    def create_environment(self, env_name: str) -> None:
        """Create (or update) a repository environment.

        Raises:
            GitHubCLIError: When the API call fails
        """
        try:
            self._run([
                "api", f"repos/{self.repository}/environments/{env_name}",
                "-X", "PUT", "--silent",
            ])
        except CommandError as e:
            raise GitHubCLIError(f"Failed to create environment {env_name}: {e}")

    def configure_protection(self, env_name: str, rules: Dict[str, Any]) -> None:
        """Apply protection rules to an environment.

        Args:
            env_name: Environment name
            rules: Request body for the environments API

        Raises:
            GitHubCLIError: When the API call fails
        """
        try:
            self._run(
                [
                    "api", f"repos/{self.repository}/environments/{env_name}",
                    "-X", "PUT", "--input", "-", "--silent",
                ],
                input_text=json.dumps(rules),
            )
        except CommandError as e:
            raise GitHubCLIError(
                f"Failed to configure protection rules for {env_name}: {e}"
            )

    def set_secret(self, name: str, value: str, env: Optional[str] = None) -> None:
        """Set a repository or environment secret.

        Args:
            name: Secret name
            value: Secret value
            env: Environment name; repository level when None

        Raises:
            GitHubCLIError: When gh rejects the secret
        """
        args = ["secret", "set", name, "--repo", self.repository]
        if env:
            args.extend(["--env", env])
        try:
            self._run(args, input_text=value)
        except CommandError as e:
            scope = f"environment {env}" if env else "repository"
            raise GitHubCLIError(f"Failed to set secret {name} on {scope}: {e}")
        logger.debug("Secret %s set (%s)", name, env or "repository")

    def set_variable(self, name: str, value: str, env: Optional[str] = None) -> None:
        """Set a repository or environment variable.

        Raises:
            GitHubCLIError: When gh rejects the variable
        """
        args = ["variable", "set", name, "--repo", self.repository]
        if env:
            args.extend(["--env", env])
        try:
            self._run(args, input_text=value)
        except CommandError as e:
            scope = f"environment {env}" if env else "repository"
            raise GitHubCLIError(f"Failed to set variable {name} on {scope}: {e}")
        logger.debug("Variable %s set (%s)", name, env or "repository")
