"""SSM Parameter Store helpers."""

import os
from functools import lru_cache

import boto3
from aws_lambda_powertools import Logger

logger = Logger(child=True)

# SSM Parameter name for the Google Translate API key
TRANSLATE_API_KEY_PARAM = "/mlt/dev/secrets/google_translate_api_key"


@lru_cache(maxsize=1)
def get_translate_api_key() -> str:
    """Retrieve the translation provider API key from SSM Parameter Store.

    Cached to avoid repeated API calls within the same Lambda container.
    Uses WithDecryption=True for SecureString parameters.

    Returns:
        The translation API key string

    Raises:
        ClientError: If SSM parameter not found
    """
    param_name = os.environ.get("TRANSLATE_API_KEY_PARAM", TRANSLATE_API_KEY_PARAM)

    client = boto3.client("ssm")
    response = client.get_parameter(Name=param_name, WithDecryption=True)
    logger.info("Retrieved translation API key from SSM Parameter Store")
    return response["Parameter"]["Value"]
