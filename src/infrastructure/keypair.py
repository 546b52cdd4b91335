"""EC2 key pair management.

The backend instances are reached over SSH by the deployment workflow.
This module creates the project key pair once, stores the private key
locally with owner-only permissions and publishes it to GitHub.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple
from botocore.exceptions import ClientError

from src.core.aws_client import AWSClientManager
from src.core.config import Configuration
from src.core.github_client import GitHubCLI


logger = logging.getLogger(__name__)


class KeyPairError(Exception):
    """Raised when the EC2 key pair cannot be created."""
    pass


class KeyPairManager:
    """Creates the project EC2 key pair and publishes it to GitHub."""

    def __init__(self, config: Configuration, aws_client: AWSClientManager,
                 key_dir: Optional[str] = None) -> None:
        """Initialize key pair manager.

        Args:
            config: Loaded project configuration
            aws_client: Configured AWS client manager
            key_dir: Directory for the private key (default: system temp dir)
        """
        self.config = config
        self.aws_client = aws_client
        self.key_name = config.get_key_name()
        self.key_dir = Path(key_dir or tempfile.gettempdir())

    @property
    def pem_path(self) -> Path:
        return self.key_dir / f"{self.key_name}.pem"

    def _get_client(self):
        return self.aws_client.get_client("ec2", self.config.get_region())

    def key_pair_exists(self) -> bool:
        """Check whether the key pair is already registered in EC2.

        Raises:
            KeyPairError: On errors other than a missing key pair
        """
        try:
            self._get_client().describe_key_pairs(KeyNames=[self.key_name])
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "InvalidKeyPair.NotFound":
                return False
            raise KeyPairError(f"Failed to check key pair {self.key_name}: {e}")

    def create_key_pair(self) -> Path:
        """Create the key pair and save the private key.

        Returns:
            Path to the written PEM file

        Raises:
            KeyPairError: When creation fails
        """
        try:
            response = self._get_client().create_key_pair(KeyName=self.key_name)
        except ClientError as e:
            raise KeyPairError(f"Failed to create key pair {self.key_name}: {e}")

        self.key_dir.mkdir(parents=True, exist_ok=True)
        pem_path = self.pem_path
        fd = os.open(str(pem_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(response["KeyMaterial"])
        os.chmod(pem_path, 0o600)

        logger.info("Key pair %s created, private key at %s", self.key_name, pem_path)
        return pem_path

    def ensure_key_pair(self) -> Tuple[bool, Optional[Path]]:
        """Create the key pair unless it already exists.

        Returns:
            Tuple of (created, pem_path); pem_path is None when nothing was created
        """
        if self.key_pair_exists():
            print(f"✅ Key pair {self.key_name} already exists")
            return False, None

        print(f"Creating key pair: {self.key_name}")
        pem_path = self.create_key_pair()
        print("✅ Key pair created successfully")
        print(f"📝 Private key saved to: {pem_path}")
        return True, pem_path

    def publish(self, github: Optional[GitHubCLI], pem_path: Path) -> bool:
        """Store EC2_KEY_NAME and EC2_PRIVATE_KEY as repository secrets.

        Args:
            github: GitHub CLI wrapper, or None when gh is not usable
            pem_path: Private key written by create_key_pair

        Returns:
            True if the secrets were set, False if manual steps were printed

        Raises:
            GitHubCLIError: When gh rejects a secret
        """
        if github is None or not github.is_authenticated():
            print("📝 Please add these secrets to GitHub manually:")
            print(f"gh secret set EC2_KEY_NAME --body '{self.key_name}'")
            print(f"gh secret set EC2_PRIVATE_KEY < {pem_path}")
            return False

        print("Adding EC2 secrets to GitHub...")
        github.set_secret("EC2_KEY_NAME", self.key_name)
        print("✅ EC2_KEY_NAME added to GitHub secrets")

        if pem_path.exists():
            github.set_secret("EC2_PRIVATE_KEY", pem_path.read_text())
            print("✅ EC2_PRIVATE_KEY added to GitHub secrets")
        else:
            print(f"⚠️ EC2 private key file not found at {pem_path}")

        return True
