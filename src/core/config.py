"""Configuration management for the full stack deployment setup.

This module handles config.json loading (YAML is accepted as well),
validation of the sections every setup flow depends on, and
environment variable override support.
"""

import json
import os
import re
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml


DEFAULT_CONFIG_FILES = ["config.json", "config.yaml", "config.yml"]
EXAMPLE_CONFIG_FILE = "config.example.json"

REQUIRED_SECTIONS = ["project", "aws", "environments", "infrastructure", "github"]

PROJECT_NAME_PLACEHOLDERS = {"unknown", "my-fullstack-app"}
REPOSITORY_PLACEHOLDERS = {"unknown", "owner/repo-name"}
CREDENTIAL_PLACEHOLDERS = {
    "unknown",
    "your_aws_access_key_id",
    "your_aws_secret_access_key",
}

DEFAULT_INSTANCE_TYPE = "t3.small"
DEFAULT_TERRAFORM_DIRECTORY = "terraform"
DEFAULT_PROTECTED_ENVIRONMENTS = ["prd"]

_REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


class Configuration:
    """Configuration management with JSON/YAML loading and validation.

    This class loads the project configuration file, validates the
    required sections and exposes typed accessors used by the
    repository and infrastructure setup flows.
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file.
                        If None, auto-detects config.json in current directory.

        Raises:
            ConfigurationError: When configuration file is invalid
        """
        self._config: Dict[str, Any] = {}
        self._loaded_sections: set = set()
        self._config_path = self._resolve_config_path(config_path)
        self._load_configuration()
        self._apply_environment_overrides()
        self._validate_configuration()

    @property
    def path(self) -> Path:
        """Path of the loaded configuration file."""
        return self._config_path

    def _resolve_config_path(self, config_path: Optional[str]) -> Path:
        """Resolve configuration file path.

        Args:
            config_path: Optional path to configuration file

        Returns:
            Resolved Path object to configuration file

        Raises:
            ConfigurationError: When configuration file not found
        """
        if config_path:
            path = Path(config_path)
        else:
            path = Path(DEFAULT_CONFIG_FILES[0])
            for candidate in DEFAULT_CONFIG_FILES:
                if Path(candidate).exists():
                    path = Path(candidate)
                    break

        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {path}. "
                f"Please create it from {EXAMPLE_CONFIG_FILE} or specify a valid path."
            )

        return path

    def _load_configuration(self) -> None:
        """Load configuration from JSON or YAML file.

        Raises:
            ConfigurationError: When the file cannot be parsed
        """
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                if self._config_path.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"{self._config_path} appears to be malformed: {e}"
            )
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file {self._config_path}: {e}"
            )
        except IOError as e:
            raise ConfigurationError(
                f"Unable to read configuration file {self._config_path}: {e}"
            )

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{self._config_path} must contain a JSON object at the top level"
            )
        self._config = data
        self._loaded_sections = set(data)

    def _validate_configuration(self) -> None:
        """Validate configuration has required fields.

        Raises:
            ConfigurationError: When required fields are missing
        """
        # Overrides may create sections, so check what the file declared
        for section in REQUIRED_SECTIONS:
            if section not in self._loaded_sections:
                raise ConfigurationError(
                    f"Required configuration section '{section}' is missing"
                )

        project_name = self.get("project.name")
        if (
            not isinstance(project_name, str)
            or not project_name.strip()
            or project_name in PROJECT_NAME_PLACEHOLDERS
        ):
            raise ConfigurationError("Missing or placeholder project.name in config.json")

        region = self.get("aws.region")
        if not isinstance(region, str) or not region.strip() or region == "unknown":
            raise ConfigurationError("Missing or invalid aws.region in config.json")

        repository = self.get("github.repository")
        if (
            not isinstance(repository, str)
            or not repository.strip()
            or repository in REPOSITORY_PLACEHOLDERS
        ):
            raise ConfigurationError(
                "Missing or placeholder github.repository in config.json"
            )
        if not _REPOSITORY_PATTERN.match(repository):
            raise ConfigurationError(
                f"Field 'github.repository' must look like 'owner/repo', got '{repository}'"
            )

        environments = self._config["environments"]
        if not isinstance(environments, list) or not environments:
            raise ConfigurationError("Field 'environments' must be a non-empty list")
        for env in environments:
            if not isinstance(env, str) or not env.strip():
                raise ConfigurationError(
                    "Field 'environments' must only contain non-empty strings"
                )

    def _apply_environment_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        if "AWS_REGION" in os.environ:
            self._set_nested_value("aws.region", os.environ["AWS_REGION"])

        if "AWS_PROFILE" in os.environ:
            self._set_nested_value("aws.profile", os.environ["AWS_PROFILE"])

        # Set by GitHub Actions runners
        if "GITHUB_REPOSITORY" in os.environ:
            self._set_nested_value(
                "github.repository", os.environ["GITHUB_REPOSITORY"]
            )

    def _set_nested_value(self, key_path: str, value: Any) -> None:
        """Set nested configuration value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            value: Value to set
        """
        keys = key_path.split(".")
        current = self._config

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        current = self._config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_project_name(self) -> str:
        return self.get("project.name")

    def get_region(self) -> str:
        return self.get("aws.region")

    def get_profile(self) -> Optional[str]:
        return self.get("aws.profile")

    def get_environments(self) -> List[str]:
        """Get configured environment names in declaration order."""
        return list(self._config["environments"])

    def get_github_repository(self) -> str:
        return self.get("github.repository")

    def get_protected_environments(self) -> List[str]:
        """Get environments that receive deployment protection rules.

        Only environments that are also configured are returned.
        """
        protected = self.get(
            "github.protected_environments", DEFAULT_PROTECTED_ENVIRONMENTS
        )
        return [env for env in self.get_environments() if env in protected]

    def get_aws_credentials(self) -> Dict[str, str]:
        """Get the AWS credentials stored in the configuration file.

        Returns:
            Dictionary with access_key_id and secret_access_key (may be empty)
        """
        return {
            "access_key_id": self.get("aws.credentials.access_key_id") or "",
            "secret_access_key": self.get("aws.credentials.secret_access_key") or "",
        }

    def has_deployment_credentials(self) -> bool:
        """Check whether real AWS credentials are present.

        Returns:
            False when either credential is empty or a template placeholder
        """
        for value in self.get_aws_credentials().values():
            if not value or value in CREDENTIAL_PLACEHOLDERS:
                return False
        return True

    def get_frontend_domain(self, env: str) -> Optional[str]:
        return self.get(f"infrastructure.frontend.domain.{env}")

    def get_backend_domain(self, env: str) -> Optional[str]:
        return self.get(f"infrastructure.backend.domain.{env}")

    def get_instance_type(self, env: str) -> str:
        return self.get(f"infrastructure.backend.instance_type.{env}") or DEFAULT_INSTANCE_TYPE

    def get_load_balancer(self, env: str) -> Optional[bool]:
        value = self.get(f"infrastructure.backend.load_balancer.{env}")
        if value is None or isinstance(value, bool):
            return value
        raise ConfigurationError(
            f"Field 'infrastructure.backend.load_balancer.{env}' must be true or false, "
            f"got {value!r}"
        )

    def get_key_name(self) -> str:
        """EC2 key pair name shared by all environments."""
        return f"{self.get_project_name()}-key"

    def get_state_bucket_name(self) -> str:
        return f"{self.get_project_name()}-terraform-state"

    def get_lock_table_name(self) -> str:
        return f"{self.get_project_name()}-terraform-locks"

    def get_terraform_directory(self) -> Path:
        """Terraform root module directory, relative to the config file."""
        directory = Path(
            self.get("infrastructure.terraform.directory", DEFAULT_TERRAFORM_DIRECTORY)
        )
        if directory.is_absolute():
            return directory
        return self._config_path.parent / directory

    def get_terraform_backend(self) -> str:
        """Terraform state backend type ('local' or 's3')."""
        return self.get("infrastructure.terraform.backend", "local")

    def to_dict(self) -> Dict[str, Any]:
        """Get complete configuration as dictionary.

        Returns:
            Complete configuration dictionary
        """
        return self._config.copy()


def ensure_config_file(
    config_path: str = DEFAULT_CONFIG_FILES[0],
    example_path: str = EXAMPLE_CONFIG_FILE,
    safety=None,
) -> Path:
    """Create the configuration file from the example template if missing.

    Args:
        config_path: Path of the configuration file to ensure
        example_path: Template copied when the configuration is missing
        safety: Optional SafetyManager used to pause while the user edits

    Returns:
        Path to the configuration file

    Raises:
        ConfigurationError: When neither file exists
    """
    path = Path(config_path)
    if path.exists():
        return path

    example = Path(example_path)
    if not example.exists():
        raise ConfigurationError(
            f"{example} not found! Please ensure {example.name} exists in the current directory."
        )

    print(f"Creating {path} from {example}...")
    shutil.copyfile(example, path)
    print(f"📝 Please edit {path} with your actual project configuration")
    print()
    print("Required updates:")
    print("  - project.name: Your project name")
    print("  - infrastructure domains: Your actual domain names")
    print("  - github.repository: Your GitHub repository (owner/repo-name)")
    print("  - aws.credentials: Your AWS access key and secret key")
    print()
    if safety is not None:
        safety.pause(f"Press Enter when you've updated {path}...")

    return path
