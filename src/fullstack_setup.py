#!/usr/bin/env python3
"""Full Stack Deployment Setup - Main Entry Point.

This is the single entry point for preparing a full-stack application
for deployment: GitHub repository setup and AWS infrastructure setup.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from botocore.exceptions import NoCredentialsError, ProfileNotFound

from src import __version__
from src.core.aws_client import AWSClientManager
from src.core.command import CommandError
from src.core.config import (
    Configuration,
    ConfigurationError,
    DEFAULT_CONFIG_FILES,
    EXAMPLE_CONFIG_FILE,
    ensure_config_file,
)
from src.core.env_file import EnvFileError
from src.core.github_client import GitHubCLI, GitHubCLIError
from src.core.interactive import InteractiveMenu, build_validator
from src.core.safety import SafetyManager
from src.infrastructure.keypair import KeyPairError
from src.infrastructure.orchestrator import (
    InfrastructureSetupError,
    InfrastructureSetupOrchestrator,
)
from src.infrastructure.outputs import OutputPropagationError
from src.infrastructure.state_backend import StateBackendError
from src.infrastructure.terraform import TerraformError
from src.repository.orchestrator import (
    RepositorySetupError,
    RepositorySetupOrchestrator,
)
from src.repository.secrets import SecretUploadError, UploadTarget


COMMANDS = ["repository", "infrastructure", "all", "validate", "help"]

SETUP_ERRORS = (
    CommandError,
    EnvFileError,
    GitHubCLIError,
    InfrastructureSetupError,
    KeyPairError,
    OutputPropagationError,
    RepositorySetupError,
    SecretUploadError,
    StateBackendError,
    TerraformError,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fullstack-setup",
        description="Full Stack Deployment Setup Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  repository       Setup GitHub repository, environments and secrets
  infrastructure   Setup AWS infrastructure with Terraform
  all              Run repository setup, then infrastructure setup
  validate         Only validate configuration and prerequisites
  help             Show this help message

Examples:
  %(prog)s                          # Interactive menu
  %(prog)s repository               # Setup GitHub repository
  %(prog)s infrastructure --yes     # Provision without prompts
  %(prog)s validate --config config.yaml
        """,
    )

    parser.add_argument("command", nargs="?", choices=COMMANDS, help="Setup step to run")
    parser.add_argument(
        "--config",
        help="Path to configuration file (default: auto-detect config.json)",
    )
    parser.add_argument("--env-file", default=".env", help="Path to the project .env file")
    parser.add_argument("--profile", help="AWS profile name to use for credentials")
    parser.add_argument("--region", help="AWS region to use (overrides configuration file)")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Answer yes to every confirmation (non-interactive mode)",
    )
    parser.add_argument(
        "--upload-target",
        choices=[target.value for target in UploadTarget],
        help="Where to upload .env entries (default: ask)",
    )
    parser.add_argument("--environment", help="Environment for --upload-target environment")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--version",
        action="version",
        version=f"Full Stack Deployment Setup v{__version__}",
    )
    return parser


def display_banner() -> None:
    """Display application banner."""
    print(
        """
╔══════════════════════════════════════════════════════════════╗
║               Full Stack Deployment Setup Tool               ║
║                                                              ║
║   GitHub environments, secrets and AWS infrastructure setup  ║
╚══════════════════════════════════════════════════════════════╝
    """
    )


def load_configuration(config_path: Optional[str], safety: SafetyManager) -> Configuration:
    """Load configuration, creating config.json from the template if needed.

    Raises:
        ConfigurationError: When the file is missing or invalid
    """
    if not config_path and not any(Path(name).exists() for name in DEFAULT_CONFIG_FILES):
        ensure_config_file(DEFAULT_CONFIG_FILES[0], EXAMPLE_CONFIG_FILE, safety)
    return Configuration(config_path)


def validate_prerequisites(
    config: Configuration, aws_client: AWSClientManager, github: GitHubCLI
) -> bool:
    """Validate everything both setup flows depend on.

    Returns:
        True if all prerequisites are met, False otherwise
    """
    print("Validating prerequisites...")
    print("-" * 50)

    validator = build_validator(config, aws_client, github)
    results = validator.validate_all()
    validator.report(results)

    print("-" * 50)
    is_ready = validator.is_ready(results)
    if is_ready:
        print("✅ All prerequisites validated successfully!")
    else:
        print("❌ Prerequisites validation failed.")
        print("   Please address the issues above before proceeding.")
    return is_ready


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.command == "help":
            parser.print_help()
            return 0

        if args.verbose:
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(asctime)s %(name)s %(levelname)s %(message)s",
            )

        display_banner()
        safety = SafetyManager(enable_confirmations=not args.yes)

        if args.region:
            os.environ["AWS_REGION"] = args.region

        try:
            config = load_configuration(args.config, safety)
        except ConfigurationError as e:
            print(f"❌ Configuration error: {e}")
            return 1

        print(f"📄 Using configuration file: {config.path}")

        github = GitHubCLI(config.get_github_repository())

        try:
            aws_client = AWSClientManager(
                profile_name=args.profile or config.get_profile(),
                region_name=config.get_region(),
            )
        except (NoCredentialsError, ProfileNotFound) as e:
            print(f"❌ AWS client initialization failed: {e}")
            print("   Please configure AWS CLI credentials (aws configure) or set a profile.")
            return 1

        if args.command == "validate":
            return 0 if validate_prerequisites(config, aws_client, github) else 1

        if args.command is None:
            print("\n🚀 Starting interactive mode...")
            InteractiveMenu(config, aws_client, github, safety, env_file=args.env_file).run()
            return 0

        if args.command in ("repository", "all"):
            upload_target = UploadTarget(args.upload_target) if args.upload_target else None
            if upload_target is None and args.environment:
                upload_target = UploadTarget.SINGLE_ENVIRONMENT
            RepositorySetupOrchestrator(
                config,
                aws_client,
                github,
                safety,
                env_file=args.env_file,
                upload_target=upload_target,
                upload_environment=args.environment,
            ).run()

        if args.command in ("infrastructure", "all"):
            InfrastructureSetupOrchestrator(config, aws_client, github, safety).run()

        return 0

    except KeyboardInterrupt:
        print("\n\n👋 Operation cancelled by user.")
        return 130

    except SETUP_ERRORS as e:
        print(f"\n❌ Setup failed: {e}")
        return 1

    except Exception as e:
        logging.getLogger(__name__).debug("Unexpected error", exc_info=True)
        print(f"\n❌ Unexpected error: {e}")
        print("   Please check your configuration and try again.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
