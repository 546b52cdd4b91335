"""Prerequisites validation framework for the setup flows.

This module provides the validation framework used before any cloud or
GitHub resource is touched: required command line tools, GitHub CLI
authentication and AWS credentials.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Any, Sequence
from botocore.exceptions import NoCredentialsError

from .aws_client import AWSClientManager
from .command import command_exists
from .github_client import GitHubCLI


TOOL_DESCRIPTIONS = {
    "gh": "gh (GitHub CLI)",
    "terraform": "terraform",
    "aws": "aws (AWS CLI)",
}

STATUS_SYMBOLS = {
    "PASSED": "✅",
    "FAILED": "❌",
    "WARNING": "⚠️",
    "SKIPPED": "⏭️",
}


class ValidationStatus(Enum):
    """Validation result status."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    WARNING = "WARNING"
    SKIPPED = "SKIPPED"


@dataclass
class ValidationResult:
    """Result of a validation check."""

    validator_name: str
    status: ValidationStatus
    message: str
    remediation_steps: Optional[List[str]] = None
    details: Optional[Dict[str, Any]] = None


class BaseValidator(ABC):
    """Base class for all validators."""

    # A failed critical validator stops the remaining checks
    critical = False

    @abstractmethod
    def validate(self) -> ValidationResult:
        """Perform validation check.

        Returns:
            ValidationResult with status and details
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Get validator name."""
        pass


class ToolsValidator(BaseValidator):
    """Validates that required command line tools are installed."""

    critical = True

    def __init__(self, tools: Sequence[str]) -> None:
        """Initialize tools validator.

        Args:
            tools: Executable names that must be on PATH
        """
        self.tools = list(tools)

    @property
    def name(self) -> str:
        """Get validator name."""
        return "Required Tools"

    def validate(self) -> ValidationResult:
        """Check every required tool is on PATH.

        Returns:
            ValidationResult listing missing tools
        """
        missing = [tool for tool in self.tools if not command_exists(tool)]

        if missing:
            names = " ".join(missing)
            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.FAILED,
                message="Missing required tools: "
                + ", ".join(TOOL_DESCRIPTIONS.get(t, t) for t in missing),
                remediation_steps=[
                    "Please install the missing tools and try again.",
                    f"Ubuntu/Debian: sudo apt install {names}",
                    f"macOS: brew install {names}",
                ],
                details={"missing_tools": missing},
            )

        return ValidationResult(
            validator_name=self.name,
            status=ValidationStatus.PASSED,
            message=f"All required tools installed ({', '.join(self.tools)})",
        )


class GitHubAuthValidator(BaseValidator):
    """Validates GitHub CLI authentication."""

    def __init__(self, github: GitHubCLI, required: bool = True) -> None:
        """Initialize GitHub authentication validator.

        Args:
            github: GitHub CLI wrapper
            required: Report FAILED instead of WARNING when not authenticated
        """
        self.github = github
        self.required = required

    @property
    def name(self) -> str:
        """Get validator name."""
        return "GitHub CLI Authentication"

    def validate(self) -> ValidationResult:
        if self.github.is_authenticated():
            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.PASSED,
                message=f"GitHub CLI authenticated for {self.github.repository}",
            )

        return ValidationResult(
            validator_name=self.name,
            status=ValidationStatus.FAILED if self.required else ValidationStatus.WARNING,
            message="GitHub CLI is not authenticated",
            remediation_steps=["Please run: gh auth login"],
        )


class CredentialsValidator(BaseValidator):
    """Validates AWS credentials and permissions."""

    def __init__(self, aws_client: AWSClientManager) -> None:
        """Initialize validator with AWS client manager.

        Args:
            aws_client: Configured AWS client manager
        """
        self.aws_client = aws_client

    @property
    def name(self) -> str:
        """Get validator name."""
        return "AWS Credentials"

    def validate(self) -> ValidationResult:
        """Validate AWS credentials are working.

        Returns:
            ValidationResult indicating credential status
        """
        try:
            account_id = self.aws_client.get_account_id()
            region = self.aws_client.get_current_region()

            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.PASSED,
                message=f"AWS credentials valid for account {account_id} in region {region}",
                details={"account_id": account_id, "region": region},
            )

        except NoCredentialsError as e:
            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.FAILED,
                message=str(e),
                remediation_steps=[
                    "Configure AWS credentials using one of these methods:",
                    "1. AWS CLI: Run 'aws configure'",
                    "2. Environment variables: Set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY",
                    "3. AWS profiles: Set aws.profile in config.json or AWS_PROFILE",
                ],
            )
        except Exception as e:
            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.FAILED,
                message=f"Credential validation failed: {str(e)}",
                remediation_steps=[
                    "Check AWS credential configuration",
                    "Verify IAM permissions for STS GetCallerIdentity",
                ],
            )


class PrerequisitesValidator:
    """Runs a sequence of validators and reports their results."""

    def __init__(self, validators: Sequence[BaseValidator]) -> None:
        """Initialize prerequisites validator.

        Args:
            validators: Validators to run in order
        """
        self.validators = list(validators)

    def validate_all(self) -> List[ValidationResult]:
        """Run all validation checks.

        Returns:
            List of ValidationResult objects
        """
        results = []

        for validator in self.validators:
            try:
                result = validator.validate()
                results.append(result)

                if result.status == ValidationStatus.FAILED and validator.critical:
                    break

            except Exception as e:
                results.append(
                    ValidationResult(
                        validator_name=validator.name,
                        status=ValidationStatus.FAILED,
                        message=f"Validation error: {str(e)}",
                        remediation_steps=[
                            "Check tool installation and network access",
                        ],
                    )
                )

        return results

    def is_ready(self, results: List[ValidationResult]) -> bool:
        """Check if all prerequisites are met.

        Args:
            results: List of validation results

        Returns:
            True if no check failed, False otherwise
        """
        for result in results:
            if result.status == ValidationStatus.FAILED:
                return False
        return True

    def report(self, results: List[ValidationResult]) -> None:
        """Print validation results with remediation steps."""
        for result in results:
            status_symbol = STATUS_SYMBOLS.get(result.status.value, "❓")
            print(f"{status_symbol} {result.validator_name}: {result.message}")

            if result.remediation_steps:
                for step in result.remediation_steps:
                    print(f"   • {step}")
