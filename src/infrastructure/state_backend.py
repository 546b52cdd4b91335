"""Terraform remote state backend management.

This module creates the S3 bucket holding Terraform state and the
DynamoDB table used for state locking. Both operations probe for the
resource first so running them again changes nothing.
"""

import logging
from typing import Dict
from botocore.exceptions import ClientError

from src.core.aws_client import AWSClientManager
from src.core.config import Configuration


logger = logging.getLogger(__name__)


class StateBackendError(Exception):
    """Raised when the Terraform state backend cannot be prepared."""
    pass


class TerraformStateBackend:
    """Manages the S3 state bucket and DynamoDB lock table."""

    def __init__(self, config: Configuration, aws_client: AWSClientManager) -> None:
        """Initialize state backend manager.

        Args:
            config: Loaded project configuration
            aws_client: Configured AWS client manager
        """
        self.config = config
        self.aws_client = aws_client
        self.region = config.get_region()
        self.bucket_name = config.get_state_bucket_name()
        self.table_name = config.get_lock_table_name()

    def bucket_exists(self) -> bool:
        """Check whether the state bucket exists and is ours.

        Raises:
            StateBackendError: When the bucket exists but is not accessible
        """
        s3 = self.aws_client.get_client("s3", self.region)
        try:
            s3.head_bucket(Bucket=self.bucket_name)
            return True
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code in ("404", "NoSuchBucket", "NotFound"):
                return False
            if error_code in ("403", "AccessDenied"):
                raise StateBackendError(
                    f"Bucket {self.bucket_name} exists but is owned by another account "
                    "or is not accessible. Choose a different project.name."
                )
            raise StateBackendError(f"Failed to check bucket {self.bucket_name}: {e}")

    def ensure_bucket(self) -> bool:
        """Create the state bucket if needed and apply its settings.

        Returns:
            True if the bucket was created, False if it already existed

        Raises:
            StateBackendError: When creation or configuration fails
        """
        s3 = self.aws_client.get_client("s3", self.region)
        created = False

        if self.bucket_exists():
            print(f"  ℹ️ Bucket {self.bucket_name} already exists")
        else:
            print(f"  Creating S3 bucket for Terraform state: {self.bucket_name}")
            kwargs = {"Bucket": self.bucket_name}
            # us-east-1 rejects an explicit location constraint
            if self.region != "us-east-1":
                kwargs["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.region
                }
            try:
                s3.create_bucket(**kwargs)
                created = True
            except ClientError as e:
                if e.response["Error"]["Code"] != "BucketAlreadyOwnedByYou":
                    raise StateBackendError(
                        f"Failed to create bucket {self.bucket_name}: {e}"
                    )

        try:
            s3.put_bucket_versioning(
                Bucket=self.bucket_name,
                VersioningConfiguration={"Status": "Enabled"},
            )
            s3.put_bucket_encryption(
                Bucket=self.bucket_name,
                ServerSideEncryptionConfiguration={
                    "Rules": [
                        {
                            "ApplyServerSideEncryptionByDefault": {
                                "SSEAlgorithm": "AES256"
                            }
                        }
                    ]
                },
            )
            s3.put_public_access_block(
                Bucket=self.bucket_name,
                PublicAccessBlockConfiguration={
                    "BlockPublicAcls": True,
                    "IgnorePublicAcls": True,
                    "BlockPublicPolicy": True,
                    "RestrictPublicBuckets": True,
                },
            )
        except ClientError as e:
            raise StateBackendError(
                f"Failed to configure bucket {self.bucket_name}: {e}"
            )

        logger.info("State bucket %s ready (created=%s)", self.bucket_name, created)
        return created

    def ensure_lock_table(self) -> bool:
        """Create the DynamoDB lock table if needed.

        Returns:
            True if the table was created, False if it already existed

        Raises:
            StateBackendError: When creation fails
        """
        dynamodb = self.aws_client.get_client("dynamodb", self.region)

        try:
            dynamodb.describe_table(TableName=self.table_name)
            print(f"  ℹ️ DynamoDB table {self.table_name} already exists")
            return False
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceNotFoundException":
                raise StateBackendError(
                    f"Failed to check table {self.table_name}: {e}"
                )

        print(f"  Creating DynamoDB table for state locking: {self.table_name}")
        try:
            dynamodb.create_table(
                TableName=self.table_name,
                AttributeDefinitions=[
                    {"AttributeName": "LockID", "AttributeType": "S"}
                ],
                KeySchema=[{"AttributeName": "LockID", "KeyType": "HASH"}],
                ProvisionedThroughput={
                    "ReadCapacityUnits": 5,
                    "WriteCapacityUnits": 5,
                },
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceInUseException":
                print(f"  ℹ️ DynamoDB table {self.table_name} already exists")
                return False
            raise StateBackendError(f"Failed to create table {self.table_name}: {e}")

        dynamodb.get_waiter("table_exists").wait(TableName=self.table_name)
        logger.info("Lock table %s created", self.table_name)
        return True

    def ensure(self) -> Dict[str, bool]:
        """Prepare bucket and lock table.

        Returns:
            Dictionary telling which resources were created
        """
        bucket_created = self.ensure_bucket()
        table_created = self.ensure_lock_table()
        print("✅ Terraform backend initialized")
        return {"bucket_created": bucket_created, "table_created": table_created}

    def backend_config(self) -> Dict[str, str]:
        """Backend settings passed to `terraform init -backend-config`."""
        return {
            "bucket": self.bucket_name,
            "key": "terraform.tfstate",
            "region": self.region,
            "dynamodb_table": self.table_name,
            "encrypt": "true",
        }
