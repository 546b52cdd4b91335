"""Infrastructure setup orchestration.

This module provides the InfrastructureSetupOrchestrator class which
provisions AWS resources for every configured environment:

1. Prerequisites validation
2. Terraform state backend (S3 + DynamoDB, when configured)
3. Terraform initialization
4. EC2 key pair creation and publication
5. Per-environment plan, confirmation and apply
6. Propagation of Terraform outputs to GitHub secrets
"""

import logging
from typing import Any, Dict, List, Optional

from src.core.aws_client import AWSClientManager
from src.core.config import Configuration
from src.core.github_client import GitHubCLI
from src.core.safety import SafetyManager
from src.core.validator import (
    CredentialsValidator,
    GitHubAuthValidator,
    PrerequisitesValidator,
    ToolsValidator,
)
from src.infrastructure.keypair import KeyPairManager
from src.infrastructure.outputs import OutputPropagator
from src.infrastructure.state_backend import TerraformStateBackend
from src.infrastructure.terraform import TerraformRunner, TerraformVariables


logger = logging.getLogger(__name__)


class InfrastructureSetupError(Exception):
    """Raised when infrastructure setup fails."""
    pass


class InfrastructureSetupOrchestrator:
    """Orchestrates Terraform provisioning for all environments."""

    def __init__(
        self,
        config: Configuration,
        aws_client: AWSClientManager,
        github: GitHubCLI,
        safety: SafetyManager,
        runner: Optional[TerraformRunner] = None,
        key_dir: Optional[str] = None,
    ) -> None:
        """Initialize the infrastructure setup orchestrator.

        Args:
            config: Loaded project configuration
            aws_client: Configured AWS client manager
            github: GitHub CLI wrapper for the configured repository
            safety: Confirmation manager
            runner: Terraform runner (default: one for the configured directory)
            key_dir: Directory for the EC2 private key
        """
        self.config = config
        self.aws_client = aws_client
        self.github = github
        self.safety = safety
        self._runner = runner

        self.state_backend = TerraformStateBackend(config, aws_client)
        self.key_pair_manager = KeyPairManager(config, aws_client, key_dir)
        self.output_propagator = OutputPropagator(config, github)

    @property
    def runner(self) -> TerraformRunner:
        if self._runner is None:
            self._runner = TerraformRunner(self.config.get_terraform_directory())
        return self._runner

    def build_validator(self) -> PrerequisitesValidator:
        return PrerequisitesValidator([
            ToolsValidator(["terraform", "gh"]),
            GitHubAuthValidator(self.github, required=False),
            CredentialsValidator(self.aws_client),
        ])

    def build_variables(self, env: str) -> TerraformVariables:
        """Collect Terraform variables for an environment.

        Raises:
            InfrastructureSetupError: When a domain is not configured
        """
        frontend_domain = self.config.get_frontend_domain(env)
        backend_domain = self.config.get_backend_domain(env)
        if not frontend_domain or not backend_domain:
            raise InfrastructureSetupError(
                f"Missing domain configuration for environment {env}. "
                "Please check your config.json file"
            )

        return TerraformVariables(
            project_name=self.config.get_project_name(),
            environment=env,
            aws_region=self.config.get_region(),
            frontend_domain=frontend_domain,
            backend_domain=backend_domain,
            instance_type=self.config.get_instance_type(env),
            key_name=self.config.get_key_name(),
            load_balancer=self.config.get_load_balancer(env),
        )

    def run(self) -> Dict[str, Any]:
        """Run the complete infrastructure setup.

        Returns:
            Dictionary with status, completed steps, deployed and skipped
            environments and the secrets derived from outputs

        Raises:
            InfrastructureSetupError: When a step fails
        """
        results: Dict[str, Any] = {
            'status': 'FAILED',
            'steps_completed': [],
            'deployed': [],
            'skipped': [],
            'outputs': {},
            'secrets': {},
        }
        steps: List[str] = results['steps_completed']

        print("🚀 Starting Infrastructure Setup...")

        print("\n🔍 Step 1: Checking prerequisites...")
        self._validate_prerequisites()
        steps.append('prerequisites')

        # Validate every environment before touching any cloud resource
        variables = {env: self.build_variables(env) for env in self.config.get_environments()}

        # Fails on a missing terraform directory before any AWS resource exists
        runner = self.runner

        backend_config = None
        if self.config.get_terraform_backend() == "s3":
            print("\n🪣 Step 2: Initializing Terraform backend...")
            results['state_backend'] = self.state_backend.ensure()
            backend_config = self.state_backend.backend_config()
            steps.append('state_backend')

        print("\n⚙️  Step 3: Initializing Terraform...")
        runner.clean()
        runner.init(backend_config)
        print("✅ Terraform initialized")
        steps.append('terraform_init')

        print("\n🔑 Step 4: Creating EC2 key pair...")
        created, pem_path = self.key_pair_manager.ensure_key_pair()
        if created:
            self.key_pair_manager.publish(self._usable_github(), pem_path)
        steps.append('key_pair')

        print("\n🏗️  Step 5: Deploying infrastructure...")
        print(f"Deploying infrastructure for environments: {' '.join(variables)}")
        for env, env_variables in variables.items():
            if self.deploy_environment(env, env_variables):
                results['deployed'].append(env)
                results['outputs'][env] = self.runner.outputs()
            else:
                results['skipped'].append(env)
        steps.append('terraform_apply')

        if results['outputs']:
            print("\n🔐 Step 6: Updating GitHub secrets...")
            results['secrets'] = self.output_propagator.propagate(results['outputs'])
            steps.append('output_propagation')

        results['status'] = 'SUCCESS'
        self.show_summary(results)
        return results

    def deploy_environment(self, env: str, variables: TerraformVariables) -> bool:
        """Plan and, after confirmation, apply one environment.

        Returns:
            True if applied, False if the user declined
        """
        print("=" * 44)
        print(f"Deploying infrastructure for environment: {env}")
        print("=" * 44)

        self.runner.select_workspace(env)
        self.runner.write_tfvars(variables)
        print(f"Generated terraform.tfvars for {env}:")
        print(variables.render())

        print(f"Planning infrastructure deployment for {env}...")
        plan_file = self.runner.plan(env)

        request = self.safety.create_apply_confirmation(env, variables.to_dict())
        if not self.safety.request_confirmation(request):
            print(f"Infrastructure deployment for {env} cancelled.")
            return False

        print(f"Applying infrastructure changes for {env}...")
        self.runner.apply(plan_file)
        print(f"✅ Infrastructure for {env} deployed successfully")
        return True

    def _validate_prerequisites(self) -> None:
        validator = self.build_validator()
        results = validator.validate_all()
        validator.report(results)

        if not validator.is_ready(results):
            raise InfrastructureSetupError(
                "Prerequisites validation failed. Please address the issues above."
            )
        print("✅ All prerequisites met")

    def _usable_github(self) -> Optional[GitHubCLI]:
        if self.github.is_installed() and self.github.is_authenticated():
            return self.github
        return None

    def show_summary(self, results: Dict[str, Any]) -> None:
        print("\n" + "=" * 60)
        print("Infrastructure Setup Complete! 🎉")
        print("=" * 60)
        print("Infrastructure components:")
        if 'state_backend' in results['steps_completed']:
            print("✅ Terraform S3 backend bucket")
            print("✅ DynamoDB table for state locking")
        print("✅ EC2 key pair for server access")
        for env in results['deployed']:
            print(f"📁 Environment: {env.upper()} deployed")
        for env in results['skipped']:
            print(f"⏭️  Environment: {env.upper()} skipped")
        if results['secrets']:
            print("✅ GitHub secrets configured with infrastructure outputs")
        print("\nNext steps:")
        print("1. 🚀 Deploy your application:")
        print("   - Go to Actions tab in your GitHub repository")
        print("   - Run 'Deploy' workflow")
        print("2. 🔧 Monitor deployment:")
        print("   - Check workflow logs and verify the application in the AWS Console")
