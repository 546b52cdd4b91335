"""Unit tests for the Terraform state backend manager."""

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from src.core.aws_client import AWSClientManager
from src.core.config import Configuration
from src.infrastructure.state_backend import StateBackendError, TerraformStateBackend


def _client_error(code, operation="HeadBucket"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def clients():
    s3 = Mock()
    dynamodb = Mock()
    aws_client = Mock(spec=AWSClientManager)
    aws_client.get_client.side_effect = lambda service, region=None: {
        "s3": s3, "dynamodb": dynamodb,
    }[service]
    return aws_client, s3, dynamodb


class TestStateBucket:
    """Test cases for the S3 state bucket."""

    def test_bucket_created_with_location_constraint(self, config, clients):
        aws_client, s3, _ = clients
        s3.head_bucket.side_effect = _client_error("404")

        created = TerraformStateBackend(config, aws_client).ensure_bucket()

        assert created is True
        s3.create_bucket.assert_called_once_with(
            Bucket="shopfront-terraform-state",
            CreateBucketConfiguration={"LocationConstraint": "us-west-2"},
        )
        s3.put_bucket_versioning.assert_called_once_with(
            Bucket="shopfront-terraform-state",
            VersioningConfiguration={"Status": "Enabled"},
        )
        encryption = s3.put_bucket_encryption.call_args.kwargs
        assert encryption["ServerSideEncryptionConfiguration"]["Rules"][0][
            "ApplyServerSideEncryptionByDefault"
        ] == {"SSEAlgorithm": "AES256"}
        s3.put_public_access_block.assert_called_once()

    def test_us_east_1_has_no_location_constraint(self, write_config, config_data, clients):
        config_data["aws"]["region"] = "us-east-1"
        config = Configuration(str(write_config(config_data)))
        aws_client, s3, _ = clients
        s3.head_bucket.side_effect = _client_error("NoSuchBucket")

        TerraformStateBackend(config, aws_client).ensure_bucket()

        s3.create_bucket.assert_called_once_with(Bucket="shopfront-terraform-state")

    def test_existing_bucket_not_recreated(self, config, clients):
        aws_client, s3, _ = clients

        created = TerraformStateBackend(config, aws_client).ensure_bucket()

        assert created is False
        s3.create_bucket.assert_not_called()
        s3.put_bucket_versioning.assert_called_once()

    def test_bucket_owned_by_someone_else(self, config, clients):
        aws_client, s3, _ = clients
        s3.head_bucket.side_effect = _client_error("403")

        with pytest.raises(StateBackendError) as exc_info:
            TerraformStateBackend(config, aws_client).ensure_bucket()

        assert "owned by another account" in str(exc_info.value)

    def test_create_race_already_owned(self, config, clients):
        aws_client, s3, _ = clients
        s3.head_bucket.side_effect = _client_error("404")
        s3.create_bucket.side_effect = _client_error("BucketAlreadyOwnedByYou", "CreateBucket")

        assert TerraformStateBackend(config, aws_client).ensure_bucket() is False

    def test_create_failure(self, config, clients):
        aws_client, s3, _ = clients
        s3.head_bucket.side_effect = _client_error("404")
        s3.create_bucket.side_effect = _client_error("InvalidBucketName", "CreateBucket")

        with pytest.raises(StateBackendError):
            TerraformStateBackend(config, aws_client).ensure_bucket()


class TestLockTable:
    """Test cases for the DynamoDB lock table."""

    def test_table_created(self, config, clients):
        aws_client, _, dynamodb = clients
        dynamodb.describe_table.side_effect = _client_error(
            "ResourceNotFoundException", "DescribeTable"
        )

        created = TerraformStateBackend(config, aws_client).ensure_lock_table()

        assert created is True
        kwargs = dynamodb.create_table.call_args.kwargs
        assert kwargs["TableName"] == "shopfront-terraform-locks"
        assert kwargs["KeySchema"] == [{"AttributeName": "LockID", "KeyType": "HASH"}]
        assert kwargs["AttributeDefinitions"] == [
            {"AttributeName": "LockID", "AttributeType": "S"}
        ]
        dynamodb.get_waiter.assert_called_once_with("table_exists")

    def test_existing_table_not_recreated(self, config, clients):
        aws_client, _, dynamodb = clients

        assert TerraformStateBackend(config, aws_client).ensure_lock_table() is False
        dynamodb.create_table.assert_not_called()

    def test_table_in_use_counts_as_existing(self, config, clients):
        aws_client, _, dynamodb = clients
        dynamodb.describe_table.side_effect = _client_error(
            "ResourceNotFoundException", "DescribeTable"
        )
        dynamodb.create_table.side_effect = _client_error(
            "ResourceInUseException", "CreateTable"
        )

        assert TerraformStateBackend(config, aws_client).ensure_lock_table() is False

    def test_describe_failure(self, config, clients):
        aws_client, _, dynamodb = clients
        dynamodb.describe_table.side_effect = _client_error("AccessDeniedException", "DescribeTable")

        with pytest.raises(StateBackendError):
            TerraformStateBackend(config, aws_client).ensure_lock_table()


class TestStateBackend:
    """Test cases for the combined backend."""

    def test_second_run_creates_nothing(self, config, clients):
        aws_client, s3, dynamodb = clients
        s3.head_bucket.side_effect = [_client_error("404"), None]
        dynamodb.describe_table.side_effect = [
            _client_error("ResourceNotFoundException", "DescribeTable"),
            {"Table": {"TableStatus": "ACTIVE"}},
        ]
        backend = TerraformStateBackend(config, aws_client)

        first = backend.ensure()
        second = backend.ensure()

        assert first == {"bucket_created": True, "table_created": True}
        assert second == {"bucket_created": False, "table_created": False}
        assert s3.create_bucket.call_count == 1
        assert dynamodb.create_table.call_count == 1

    def test_backend_config(self, config, clients):
        aws_client, _, _ = clients

        assert TerraformStateBackend(config, aws_client).backend_config() == {
            "bucket": "shopfront-terraform-state",
            "key": "terraform.tfstate",
            "region": "us-west-2",
            "dynamodb_table": "shopfront-terraform-locks",
            "encrypt": "true",
        }
