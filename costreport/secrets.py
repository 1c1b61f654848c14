import json
import logging
from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .errors import SecretFetchError

LOG = logging.getLogger(__name__)


def _secretsmanager():
    return boto3.client("secretsmanager", region_name=config.SECRETS_REGION)


def fetch_secret(name: str, client=None) -> Dict[str, Any]:
    """Return the JSON payload stored under `name` in Secrets Manager."""
    client = client if client is not None else _secretsmanager()
    try:
        resp = client.get_secret_value(SecretId=name)
    except (ClientError, BotoCoreError) as e:
        raise SecretFetchError(f"unable to fetch secret {name}: {e}") from e
    raw = resp.get("SecretString")
    if not raw:
        raise SecretFetchError(f"secret {name} has no string value")
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise SecretFetchError(f"secret {name} is not valid JSON") from e
    if not isinstance(value, dict):
        raise SecretFetchError(f"secret {name} must be a JSON object")
    LOG.info("fetched secret %s", name)
    return value
