"""Route53 hosted zone validator.

SSL certificate validation for the frontend and backend domains only
completes when the root domain has a hosted zone in Route53. This
module checks that before any environment is set up.
"""

from typing import Dict, List
from botocore.exceptions import ClientError

from ...core.aws_client import AWSClientManager
from ...core.config import Configuration
from ...core.validator import BaseValidator, ValidationResult, ValidationStatus


PLACEHOLDER_DOMAINS = {"example.com", "backend.example.com"}


def root_domain(domain: str) -> str:
    """Reduce a domain to its last two labels (app.dev.example.com -> example.com)."""
    labels = domain.strip().rstrip(".").split(".")
    return ".".join(labels[-2:])


class HostedZoneValidator(BaseValidator):
    """Validates Route53 hosted zones for every configured domain."""

    def __init__(self, aws_client: AWSClientManager, config: Configuration) -> None:
        """Initialize validator.

        Args:
            aws_client: Configured AWS client manager
            config: Loaded project configuration
        """
        self.aws_client = aws_client
        self.config = config

    @property
    def name(self) -> str:
        """Validator name."""
        return "Route53 Hosted Zones"

    def get_root_domains(self) -> List[str]:
        """Collect unique root domains from frontend and backend domains.

        Returns:
            Root domains in first-seen order, placeholders excluded
        """
        roots: List[str] = []
        for env in self.config.get_environments():
            for domain in (
                self.config.get_frontend_domain(env),
                self.config.get_backend_domain(env),
            ):
                if not domain or domain in PLACEHOLDER_DOMAINS:
                    continue
                root = root_domain(domain)
                if root not in roots:
                    roots.append(root)
        return roots

    def _list_hosted_zones(self) -> Dict[str, str]:
        """Map zone name (without trailing dot) to zone ID."""
        route53 = self.aws_client.get_client("route53")
        zones: Dict[str, str] = {}
        paginator = route53.get_paginator("list_hosted_zones")
        for page in paginator.paginate():
            for zone in page.get("HostedZones", []):
                name = zone["Name"].rstrip(".")
                zones.setdefault(name, zone["Id"].replace("/hostedzone/", ""))
        return zones

    def validate(self) -> ValidationResult:
        """Validate a hosted zone exists for every root domain.

        Returns:
            ValidationResult with found and missing zones
        """
        domains = self.get_root_domains()
        if not domains:
            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.SKIPPED,
                message="No custom domains configured",
            )

        try:
            zones = self._list_hosted_zones()
        except ClientError as e:
            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.FAILED,
                message=f"Error checking Route53 hosted zones: {e}",
                remediation_steps=[
                    "Please ensure AWS credentials are configured correctly",
                    "Verify IAM permissions for route53:ListHostedZones",
                ],
            )

        found = {domain: zones[domain] for domain in domains if domain in zones}
        missing = [domain for domain in domains if domain not in zones]

        if missing:
            remediation = [
                "Please create the missing hosted zones in Route53 and update your domain's nameservers:",
            ]
            for domain in missing:
                remediation.append(
                    f"aws route53 create-hosted-zone --name {domain} --caller-reference $(date +%s)"
                )
            if zones:
                remediation.append(
                    "Current hosted zones in your AWS account: " + ", ".join(sorted(zones))
                )
            remediation.append("After creating the hosted zones, run the setup again.")

            return ValidationResult(
                validator_name=self.name,
                status=ValidationStatus.FAILED,
                message=f"{len(missing)} hosted zone(s) are missing: {', '.join(missing)}",
                remediation_steps=remediation,
                details={"found": found, "missing": missing},
            )

        return ValidationResult(
            validator_name=self.name,
            status=ValidationStatus.PASSED,
            message="All required hosted zones are available: "
            + ", ".join(f"{d} (ID: {z})" for d, z in found.items()),
            details={"found": found, "missing": []},
        )
