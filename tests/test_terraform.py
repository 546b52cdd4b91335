"""Unit tests for the Terraform command wrapper."""

import json
import subprocess
from unittest.mock import patch

import pytest

from src.core.command import CommandError
from src.infrastructure.terraform import TerraformError, TerraformRunner, TerraformVariables


def _completed(stdout=""):
    return subprocess.CompletedProcess(["terraform"], 0, stdout=stdout, stderr="")


@pytest.fixture
def tf_dir(tmp_path):
    directory = tmp_path / "terraform"
    directory.mkdir()
    return directory


@pytest.fixture
def variables():
    return TerraformVariables(
        project_name="shopfront",
        environment="dev",
        aws_region="us-west-2",
        frontend_domain="dev.shopfront.io",
        backend_domain="api.dev.shopfront.io",
        instance_type="t3.micro",
        key_name="shopfront-key",
    )


class TestTerraformVariables:
    """Test cases for tfvars rendering."""

    def test_render(self, variables):
        assert variables.render() == (
            "# Configuration for environment: dev\n"
            'project_name = "shopfront"\n'
            'environment = "dev"\n'
            'aws_region = "us-west-2"\n'
            'frontend_domain = "dev.shopfront.io"\n'
            'backend_domain = "api.dev.shopfront.io"\n'
            'instance_type = "t3.micro"\n'
            'key_name = "shopfront-key"\n'
        )

    def test_load_balancer_rendered_as_bool(self, variables):
        variables.load_balancer = False

        assert variables.render().endswith("load_balancer = false\n")
        assert variables.to_dict()["load_balancer"] is False

    def test_values_are_quoted_safely(self, variables):
        variables.project_name = 'odd "name"'

        assert 'project_name = "odd \\"name\\""' in variables.render()


class TestTerraformRunner:
    """Test cases for TerraformRunner."""

    def test_missing_directory(self, tmp_path):
        with pytest.raises(TerraformError) as exc_info:
            TerraformRunner(tmp_path / "missing")

        assert "terraform directory not found" in str(exc_info.value)

    def test_clean_keeps_state(self, tf_dir):
        (tf_dir / ".terraform" / "providers").mkdir(parents=True)
        for name in (".terraform.lock.hcl", "terraform.tfvars", "tfplan-dev",
                     "tfplan-prd", "terraform.tfstate", "main.tf"):
            (tf_dir / name).write_text("x")

        TerraformRunner(tf_dir).clean()

        assert sorted(p.name for p in tf_dir.iterdir()) == ["main.tf", "terraform.tfstate"]

    @patch("src.infrastructure.terraform.run_command")
    def test_init_with_backend_config(self, mock_run, tf_dir):
        mock_run.return_value = _completed()

        TerraformRunner(tf_dir).init({"bucket": "shopfront-terraform-state", "encrypt": "true"})

        mock_run.assert_called_once_with(
            [
                "terraform", "init", "-input=false",
                "-backend-config=bucket=shopfront-terraform-state",
                "-backend-config=encrypt=true",
            ],
            cwd=tf_dir,
            capture=False,
        )

    @patch("src.infrastructure.terraform.run_command")
    def test_select_existing_workspace(self, mock_run, tf_dir):
        mock_run.return_value = _completed("  default\n* dev\n  prd\n")

        created = TerraformRunner(tf_dir).select_workspace("prd")

        assert created is False
        assert mock_run.call_args.args[0] == ["terraform", "workspace", "select", "prd"]

    @patch("src.infrastructure.terraform.run_command")
    def test_new_workspace(self, mock_run, tf_dir):
        mock_run.return_value = _completed("* default\n")

        created = TerraformRunner(tf_dir).select_workspace("hml")

        assert created is True
        assert mock_run.call_args.args[0] == ["terraform", "workspace", "new", "hml"]

    def test_write_tfvars(self, tf_dir, variables):
        path = TerraformRunner(tf_dir).write_tfvars(variables)

        assert path == tf_dir / "terraform.tfvars"
        assert path.read_text() == variables.render()

    @patch("src.infrastructure.terraform.run_command")
    def test_plan_and_apply(self, mock_run, tf_dir):
        mock_run.return_value = _completed()
        runner = TerraformRunner(tf_dir)

        plan_file = runner.plan("dev")
        runner.apply(plan_file)

        assert plan_file == "tfplan-dev"
        commands = [c.args[0] for c in mock_run.call_args_list]
        assert commands == [
            ["terraform", "plan", "-input=false", "-out=tfplan-dev"],
            ["terraform", "apply", "-input=false", "-auto-approve", "tfplan-dev"],
        ]

    @patch("src.infrastructure.terraform.run_command")
    def test_outputs(self, mock_run, tf_dir):
        mock_run.return_value = _completed(json.dumps({
            "vpc_id": {"sensitive": False, "type": "string", "value": "vpc-123"},
            "frontend_bucket_name": {"type": "string", "value": "shopfront-dev-frontend"},
            "backend_alb_dns_name": {"type": "string", "value": None},
        }))

        outputs = TerraformRunner(tf_dir).outputs()

        assert outputs == {
            "vpc_id": "vpc-123",
            "frontend_bucket_name": "shopfront-dev-frontend",
            "backend_alb_dns_name": None,
        }

    @patch("src.infrastructure.terraform.run_command")
    def test_outputs_empty(self, mock_run, tf_dir):
        mock_run.return_value = _completed("")

        assert TerraformRunner(tf_dir).outputs() == {}

    @patch("src.infrastructure.terraform.run_command")
    def test_outputs_invalid_json(self, mock_run, tf_dir):
        mock_run.return_value = _completed("not json")

        with pytest.raises(TerraformError):
            TerraformRunner(tf_dir).outputs()

    @patch("src.infrastructure.terraform.run_command")
    def test_command_failure(self, mock_run, tf_dir):
        mock_run.side_effect = CommandError(["terraform", "apply"], 1, stderr="Error: quota")

        with pytest.raises(TerraformError) as exc_info:
            TerraformRunner(tf_dir).apply("tfplan-dev")

        assert "Error: quota" in str(exc_info.value)
