"""Interactive menu for the full stack deployment setup.

This module provides the menu shown when fullstack-setup runs without a
command. Each option delegates to the same orchestrators the
non-interactive commands use.
"""

from typing import Optional
import json
import sys

from src.core.config import Configuration
from src.core.aws_client import AWSClientManager
from src.core.github_client import GitHubCLI
from src.core.validator import (
    CredentialsValidator,
    GitHubAuthValidator,
    PrerequisitesValidator,
    ToolsValidator,
)
from src.core.safety import SafetyManager


def build_validator(
    config: Configuration, aws_client: AWSClientManager, github: GitHubCLI
) -> PrerequisitesValidator:
    """Create the validator behind the 'validate' command.

    Covers everything either setup flow needs: tools, GitHub
    authentication, AWS credentials and Route53 hosted zones.
    """
    from src.repository.validators import HostedZoneValidator

    return PrerequisitesValidator([
        ToolsValidator(["gh", "terraform"]),
        GitHubAuthValidator(github, required=True),
        CredentialsValidator(aws_client),
        HostedZoneValidator(aws_client, config),
    ])


class InteractiveMenu:
    """Interactive menu for repository and infrastructure setup."""

    def __init__(
        self,
        config: Configuration,
        aws_client: AWSClientManager,
        github: GitHubCLI,
        safety_manager: Optional[SafetyManager] = None,
        env_file: str = ".env",
    ) -> None:
        """Initialize interactive menu.

        Args:
            config: Loaded configuration object
            aws_client: Configured AWS client manager
            github: GitHub CLI wrapper for the configured repository
            safety_manager: Confirmation manager (default: interactive)
            env_file: Path to the project .env file
        """
        self.config = config
        self.aws_client = aws_client
        self.github = github
        self.safety_manager = safety_manager or SafetyManager()
        self.env_file = env_file
        self.running = True

    def run(self) -> None:
        """Run the interactive menu loop."""
        while self.running:
            self._display_main_menu()
            choice = self._get_user_choice()
            self._handle_menu_choice(choice)

    def _display_main_menu(self) -> None:
        print("\n" + "=" * 60)
        print(f"Full Stack Deployment Setup - {self.config.get_project_name()}")
        print("=" * 60)
        print("1. Validate Prerequisites")
        print("2. Repository & Environment Setup")
        print("3. Infrastructure Setup")
        print("4. Upload .env to GitHub")
        print("5. Show Configuration")
        print("0. Exit")
        print("-" * 60)

    def _get_user_choice(self) -> str:
        """Get and validate user menu choice.

        Returns:
            User's menu choice as string
        """
        while True:
            try:
                choice = input("Please select an option (0-5): ").strip()
                if choice in ["0", "1", "2", "3", "4", "5"]:
                    return choice
                print("❌ Invalid choice. Please select a number from 0-5.")
            except (EOFError, KeyboardInterrupt):
                print("\n👋 Goodbye!")
                sys.exit(0)

    def _handle_menu_choice(self, choice: str) -> None:
        handlers = {
            "0": self._exit_application,
            "1": self._validate_prerequisites,
            "2": self._repository_setup,
            "3": self._infrastructure_setup,
            "4": self._upload_env_file,
            "5": self._show_configuration,
        }

        handler = handlers.get(choice)
        if handler:
            try:
                handler()
            except Exception as e:
                print(f"\n❌ Error: {e}")
                input("\nPress Enter to continue...")
        else:
            print("❌ Invalid choice.")

    def _exit_application(self) -> None:
        print("\n👋 Thank you for using Full Stack Deployment Setup!")
        self.running = False

    def _validate_prerequisites(self) -> None:
        print("\n" + "=" * 60)
        print("Prerequisites Validation")
        print("=" * 60)

        validator = build_validator(self.config, self.aws_client, self.github)
        results = validator.validate_all()
        validator.report(results)

        passed = sum(1 for r in results if r.status.value == "PASSED")
        failed = sum(1 for r in results if r.status.value == "FAILED")
        warnings = sum(1 for r in results if r.status.value == "WARNING")
        print(f"\n📊 Summary: {passed} passed, {failed} failed, {warnings} warnings")

        if validator.is_ready(results):
            print("✅ Ready for setup!")
        else:
            print("❌ Prerequisites must be resolved before setup.")

        input("\nPress Enter to continue...")

    def _repository_setup(self) -> None:
        from src.repository.orchestrator import RepositorySetupOrchestrator

        print("\n" + "=" * 60)
        print("Repository & Environment Setup")
        print("=" * 60)

        orchestrator = RepositorySetupOrchestrator(
            self.config, self.aws_client, self.github, self.safety_manager,
            env_file=self.env_file,
        )
        orchestrator.run()
        input("\nPress Enter to continue...")

    def _infrastructure_setup(self) -> None:
        from src.infrastructure.orchestrator import InfrastructureSetupOrchestrator

        print("\n" + "=" * 60)
        print("Infrastructure Setup")
        print("=" * 60)

        orchestrator = InfrastructureSetupOrchestrator(
            self.config, self.aws_client, self.github, self.safety_manager
        )
        orchestrator.run()
        input("\nPress Enter to continue...")

    def _upload_env_file(self) -> None:
        from src.repository.orchestrator import RepositorySetupOrchestrator

        print("\n" + "=" * 60)
        print("Upload .env to GitHub")
        print("=" * 60)

        orchestrator = RepositorySetupOrchestrator(
            self.config, self.aws_client, self.github, self.safety_manager,
            env_file=self.env_file,
        )
        orchestrator.upload_env_file()
        input("\nPress Enter to continue...")

    def _show_configuration(self) -> None:
        print("\n" + "=" * 60)
        print(f"Configuration: {self.config.path}")
        print("=" * 60)

        config = self.config.to_dict()
        credentials = config.get("aws", {}).get("credentials")
        if credentials:
            # Never echo secrets back to the terminal
            config["aws"] = dict(config["aws"])
            config["aws"]["credentials"] = {key: "****" for key in credentials}
        print(json.dumps(config, indent=2))
        input("\nPress Enter to continue...")
