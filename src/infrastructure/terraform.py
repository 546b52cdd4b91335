"""Terraform command wrapper.

Runs terraform in the project's root module directory. Each deployment
environment gets its own workspace so their states never overwrite each
other.
"""

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.core.command import CommandError, run_command


logger = logging.getLogger(__name__)

TFVARS_FILE = "terraform.tfvars"


class TerraformError(Exception):
    """Raised when a terraform command fails."""
    pass


@dataclass
class TerraformVariables:
    """Input variables for one environment."""

    project_name: str
    environment: str
    aws_region: str
    frontend_domain: str
    backend_domain: str
    instance_type: str
    key_name: str
    load_balancer: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        values = {
            "project_name": self.project_name,
            "environment": self.environment,
            "aws_region": self.aws_region,
            "frontend_domain": self.frontend_domain,
            "backend_domain": self.backend_domain,
            "instance_type": self.instance_type,
            "key_name": self.key_name,
        }
        if self.load_balancer is not None:
            values["load_balancer"] = self.load_balancer
        return values

    def render(self) -> str:
        """Render as terraform.tfvars content."""
        lines = [f"# Configuration for environment: {self.environment}"]
        for name, value in self.to_dict().items():
            if isinstance(value, bool):
                rendered = "true" if value else "false"
            else:
                rendered = json.dumps(str(value))
            lines.append(f"{name} = {rendered}")
        return "\n".join(lines) + "\n"


class TerraformRunner:
    """Runs terraform commands in a working directory."""

    def __init__(self, working_dir: Union[str, Path], executable: str = "terraform") -> None:
        """Initialize runner.

        Args:
            working_dir: Terraform root module directory
            executable: terraform binary name

        Raises:
            TerraformError: If the directory does not exist
        """
        self.working_dir = Path(working_dir)
        self.executable = executable
        if not self.working_dir.is_dir():
            raise TerraformError(
                f"terraform directory not found: {self.working_dir}. "
                "Please ensure you're running from the project root directory."
            )

    def _run(self, args: List[str], capture: bool = True):
        try:
            return run_command(
                [self.executable] + args, cwd=self.working_dir, capture=capture
            )
        except CommandError as e:
            raise TerraformError(str(e)) from e

    def clean(self) -> None:
        """Remove provider cache, lock file, tfvars and stale plans.

        State files are left in place.
        """
        shutil.rmtree(self.working_dir / ".terraform", ignore_errors=True)
        for pattern in (".terraform.lock.hcl", TFVARS_FILE, "tfplan-*"):
            for path in self.working_dir.glob(pattern):
                path.unlink()
        logger.debug("Cleaned terraform working directory %s", self.working_dir)

    def init(self, backend_config: Optional[Dict[str, str]] = None) -> None:
        args = ["init", "-input=false"]
        for key, value in (backend_config or {}).items():
            args.append(f"-backend-config={key}={value}")
        self._run(args, capture=False)

    def list_workspaces(self) -> List[str]:
        result = self._run(["workspace", "list"])
        return [line.strip("* ").strip() for line in result.stdout.splitlines() if line.strip()]

    def select_workspace(self, env: str) -> bool:
        """Switch to the environment's workspace, creating it if missing.

        Returns:
            True if the workspace was created
        """
        if env in self.list_workspaces():
            self._run(["workspace", "select", env])
            return False
        self._run(["workspace", "new", env])
        logger.info("Created terraform workspace %s", env)
        return True

    def write_tfvars(self, variables: TerraformVariables) -> Path:
        path = self.working_dir / TFVARS_FILE
        path.write_text(variables.render())
        return path

    def plan(self, env: str) -> str:
        """Create a saved plan for the environment.

        Returns:
            Plan file name, relative to the working directory
        """
        plan_file = f"tfplan-{env}"
        self._run(["plan", "-input=false", f"-out={plan_file}"], capture=False)
        return plan_file

    def apply(self, plan_file: str) -> None:
        self._run(["apply", "-input=false", "-auto-approve", plan_file], capture=False)

    def outputs(self) -> Dict[str, Any]:
        """Read root module outputs of the current workspace.

        Returns:
            Mapping of output name to value

        Raises:
            TerraformError: When terraform fails or prints invalid JSON
        """
        result = self._run(["output", "-json"])
        try:
            raw = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise TerraformError(f"Could not parse terraform output: {e}")

        return {
            name: item.get("value") if isinstance(item, dict) else item
            for name, item in raw.items()
        }
