"""Safety and confirmation system for the setup flows.

This module provides the confirmation prompts guarding cost-incurring
and repository-changing operations, press-Enter pauses while the user
edits files, and an audit log of every decision.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional, List
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass
class ConfirmationRequest:
    """Request for user confirmation."""

    operation: str
    description: str
    impact_level: str  # LOW, MEDIUM, HIGH
    configuration_summary: Optional[Dict[str, Any]] = None
    warnings: Optional[List[str]] = None


class SafetyManager:
    """Safety and confirmation manager for high-impact operations.

    With confirmations disabled (non-interactive runs) every request is
    auto-confirmed and recorded as such in the audit log.
    """

    def __init__(self, enable_confirmations: bool = True) -> None:
        """Initialize safety manager.

        Args:
            enable_confirmations: Whether to enable confirmation prompts
                                 (disabled by --yes and in tests)
        """
        self.enable_confirmations = enable_confirmations
        self.audit_log: List[Dict[str, Any]] = []

    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question.

        Args:
            question: Question shown to the user
            default: Answer used when the user just presses Enter

        Returns:
            True if the user answered yes
        """
        if not self.enable_confirmations:
            self._log(question, "LOW", True, "Auto-confirmed (non-interactive mode)")
            return True

        suffix = "(Y/n)" if default else "(y/N)"
        response = input(f"{question} {suffix}: ").strip().lower()
        confirmed = default if not response else response in ["y", "yes"]

        self._log(
            question,
            "LOW",
            confirmed,
            "User confirmed" if confirmed else "User declined",
        )
        return confirmed

    def pause(self, message: str = "Press Enter to continue...") -> None:
        """Wait for the user to press Enter (no-op when non-interactive)."""
        if self.enable_confirmations:
            input(message)

    def request_confirmation(self, request: ConfirmationRequest) -> bool:
        """Request user confirmation for an operation.

        Args:
            request: ConfirmationRequest with operation details

        Returns:
            True if user confirms, False otherwise
        """
        if not self.enable_confirmations:
            self._log_confirmation(
                request, True, "Auto-confirmed (non-interactive mode)"
            )
            return True

        print("\n" + "=" * 60)
        print("CONFIRMATION REQUIRED")
        print("=" * 60)
        print(f"Operation: {request.operation}")
        print(f"Impact Level: {request.impact_level}")
        print(f"Description: {request.description}")

        if request.warnings:
            print("\n⚠️  WARNINGS:")
            for warning in request.warnings:
                print(f"   • {warning}")

        if request.configuration_summary:
            print("\nConfiguration Summary:")
            self._display_configuration(request.configuration_summary)

        print("\nDo you want to proceed? (y/N): ", end="")
        response = input().strip().lower()
        confirmed = response in ["y", "yes"]

        self._log_confirmation(
            request,
            confirmed,
            "User confirmed" if confirmed else "User declined",
        )

        return confirmed

    def _display_configuration(
        self, config: Dict[str, Any], indent: int = 0
    ) -> None:
        """Display configuration in a readable format.

        Args:
            config: Configuration dictionary to display
            indent: Indentation level for nested items
        """
        prefix = "  " * indent

        for key, value in config.items():
            if isinstance(value, dict):
                print(f"{prefix}{key}:")
                self._display_configuration(value, indent + 1)
            elif isinstance(value, list):
                print(f"{prefix}{key}: {', '.join(map(str, value))}")
            else:
                print(f"{prefix}{key}: {value}")

    def _log(self, operation: str, impact_level: str,
             confirmed: bool, reason: str) -> None:
        self.audit_log.append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "operation": operation,
            "impact_level": impact_level,
            "confirmed": confirmed,
            "reason": reason,
        })
        logger.debug("%s -> %s (%s)", operation, confirmed, reason)

    def _log_confirmation(
        self, request: ConfirmationRequest, confirmed: bool, reason: str
    ) -> None:
        """Log confirmation request and result.

        Args:
            request: The confirmation request
            confirmed: Whether the operation was confirmed
            reason: Reason for the confirmation result
        """
        self._log(request.operation, request.impact_level, confirmed, reason)
        entry = self.audit_log[-1]
        entry["description"] = request.description
        if request.configuration_summary:
            entry["configuration"] = request.configuration_summary

    def get_audit_log(self) -> List[Dict[str, Any]]:
        """Get complete audit log of confirmations.

        Returns:
            List of audit log entries
        """
        return self.audit_log.copy()

    def create_apply_confirmation(
        self, environment: str, tfvars: Dict[str, Any]
    ) -> ConfirmationRequest:
        """Create confirmation request for a Terraform apply.

        Args:
            environment: Environment being applied
            tfvars: Variables the plan was generated with

        Returns:
            ConfirmationRequest for the apply
        """
        warnings = [
            f"This will create AWS infrastructure for {environment} environment and may incur costs.",
            "Review the plan above and confirm you want to proceed.",
        ]

        return ConfirmationRequest(
            operation=f"Apply Terraform plan for {environment}",
            description=(
                "This will create or update the VPC, frontend bucket and CloudFront "
                "distribution, and backend instance and load balancer for this environment."
            ),
            impact_level="HIGH",
            configuration_summary=tfvars,
            warnings=warnings,
        )
