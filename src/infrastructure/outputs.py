"""Propagation of Terraform outputs to GitHub secrets."""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from src.core.config import Configuration
from src.core.github_client import GitHubCLI, GitHubCLIError


logger = logging.getLogger(__name__)

# (output name, legacy env-suffixed output prefix, secret prefix)
ENVIRONMENT_OUTPUTS: List[Tuple[str, str, str]] = [
    ("frontend_bucket_name", "frontend_bucket", "FRONTEND_BUCKET"),
    ("frontend_cloudfront_id", "cloudfront_distribution", "CLOUDFRONT_DISTRIBUTION"),
    ("backend_alb_dns_name", "alb_dns", "ALB_DNS"),
    ("frontend_domain", "frontend_domain", "FRONTEND_DOMAIN"),
    ("backend_domain", "backend_domain", "BACKEND_DOMAIN"),
]


class OutputPropagationError(Exception):
    """Raised when outputs cannot be stored in GitHub."""
    pass


def _usable(value: Any) -> bool:
    return value is not None and str(value) not in ("", "null")


class OutputPropagator:
    """Maps per-environment Terraform outputs to repository secrets."""

    def __init__(self, config: Configuration, github: Optional[GitHubCLI]) -> None:
        self.config = config
        self.github = github

    def build_secrets(self, outputs_by_env: Dict[str, Dict[str, Any]]) -> Dict[str, str]:
        """Compute the secrets to set.

        Args:
            outputs_by_env: Terraform outputs keyed by environment name

        Returns:
            Ordered mapping of secret name to value
        """
        secrets: Dict[str, str] = {}

        for env_outputs in outputs_by_env.values():
            vpc_id = env_outputs.get("vpc_id")
            if _usable(vpc_id):
                secrets["VPC_ID"] = str(vpc_id)
                break

        for env, env_outputs in outputs_by_env.items():
            for output_name, legacy_prefix, secret_prefix in ENVIRONMENT_OUTPUTS:
                value = env_outputs.get(output_name)
                if not _usable(value):
                    value = env_outputs.get(f"{legacy_prefix}_{env}")
                if _usable(value):
                    secrets[f"{secret_prefix}_{env.upper()}"] = str(value)

        return secrets

    def propagate(self, outputs_by_env: Dict[str, Dict[str, Any]]) -> Dict[str, str]:
        """Store outputs as GitHub secrets.

        Returns:
            Secrets that were set, or would be set when gh is unavailable

        Raises:
            OutputPropagationError: When gh rejects a secret
        """
        print("Updating GitHub secrets with infrastructure outputs...")
        secrets = self.build_secrets(outputs_by_env)

        if self.github is None or not self.github.is_authenticated():
            print("⚠️ GitHub CLI not available or not authenticated")
            print("Please manually add the following infrastructure outputs to GitHub secrets:")
            print(json.dumps(outputs_by_env, indent=2, default=str))
            return secrets

        if not secrets:
            print("⚠️ No infrastructure outputs found to add")
            return secrets

        for name, value in secrets.items():
            try:
                self.github.set_secret(name, value)
            except GitHubCLIError as e:
                raise OutputPropagationError(f"Failed to set {name}: {e}") from e
            print(f"✅ {name} added to GitHub secrets")

        logger.info("Stored %d infrastructure outputs in %s", len(secrets), self.github.repository)
        print("✅ Infrastructure outputs added to GitHub secrets for all environments")
        return secrets
