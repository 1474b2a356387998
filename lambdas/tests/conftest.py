"""Shared pytest fixtures for Lambda tests."""

import os

import boto3
import pytest
from moto import mock_aws

# Set before any handler module creates its powertools objects
os.environ.setdefault("TABLE_NAME", "test-table")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POWERTOOLS_LOG_LEVEL", "DEBUG")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "multi-lang-translate")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "MultiLangTranslate")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from shared.config import reset_config  # noqa: E402


@pytest.fixture(autouse=True)
def env_setup(monkeypatch):
    """Pin the environment and drop cached config around each test."""
    monkeypatch.setenv("TABLE_NAME", "test-table")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("SIMULATE_TRANSLATION", "false")
    monkeypatch.delenv("PRIVILEGED_DEVICES", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def dynamodb_table():
    """Create a mocked single-table DynamoDB table."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
        table = dynamodb.create_table(
            TableName="test-table",
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        table.meta.client.get_waiter("table_exists").wait(TableName="test-table")
        yield table
