"""Centralized AWS client management with session handling.

This module provides a centralized way to manage the boto3 clients used
by the setup flows (STS, Route53, EC2, S3, DynamoDB) while keeping one
session and consistent credential error handling.
"""

from typing import Dict, Optional
import boto3
from botocore.exceptions import (
    NoCredentialsError,
    ClientError,
    ProfileNotFound,
)


class AWSClientManager:
    """Centralized AWS client management with session handling.

    Clients are cached per service and region so repeated existence
    probes reuse the same connection.
    """

    def __init__(
        self, profile_name: Optional[str] = None, region_name: Optional[str] = None
    ) -> None:
        """Initialize AWS client manager.

        Args:
            profile_name: Optional AWS profile name for credentials
            region_name: Optional default region (usually aws.region from config)

        Raises:
            NoCredentialsError: When AWS credentials are not available
            ProfileNotFound: When specified profile doesn't exist
        """
        self._session: Optional[boto3.Session] = None
        self._clients: Dict[str, boto3.client] = {}
        self._profile_name = profile_name
        self._region_name = region_name
        self._validate_credentials()

    def _validate_credentials(self) -> None:
        """Validate AWS credentials are available and working.

        Raises:
            NoCredentialsError: When AWS credentials are not available
            ProfileNotFound: When specified profile doesn't exist
        """
        try:
            session = self._get_session()
            sts_client = session.client("sts")
            sts_client.get_caller_identity()
        except NoCredentialsError:
            raise NoCredentialsError()
        except ProfileNotFound:
            raise ProfileNotFound(profile=self._profile_name)
        except ClientError as e:
            if e.response["Error"]["Code"] in (
                "InvalidUserID.NotFound",
                "InvalidClientTokenId",
                "ExpiredToken",
            ):
                raise NoCredentialsError(
                    "AWS credentials are invalid or expired. "
                    "Please update your credentials."
                )
            raise

    def _get_session(self) -> boto3.Session:
        """Get or create boto3 session.

        Returns:
            Configured boto3 session
        """
        if self._session is None:
            kwargs = {}
            if self._profile_name:
                kwargs["profile_name"] = self._profile_name
            if self._region_name:
                kwargs["region_name"] = self._region_name
            self._session = boto3.Session(**kwargs)
        return self._session

    def get_client(self, service_name: str, region_name: Optional[str] = None) -> boto3.client:
        """Get AWS service client for specified region.

        Args:
            service_name: AWS service name (e.g., 'ec2', 'route53')
            region_name: AWS region name; defaults to the session region

        Returns:
            Configured boto3 client for the service and region
        """
        region = region_name or self.get_current_region()
        client_key = f"{service_name}_{region}"

        if client_key not in self._clients:
            session = self._get_session()
            self._clients[client_key] = session.client(
                service_name, region_name=region
            )

        return self._clients[client_key]

    def get_current_region(self) -> str:
        """Get current AWS region from session.

        Returns:
            Current AWS region name
        """
        session = self._get_session()
        return session.region_name or "us-east-1"

    def get_account_id(self) -> str:
        """Get current AWS account ID.

        Returns:
            Current AWS account ID

        Raises:
            ClientError: When unable to get account information
        """
        sts_client = self.get_client("sts")
        response = sts_client.get_caller_identity()
        return response["Account"]
