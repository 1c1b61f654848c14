import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from costreport.errors import ConfigurationError, SecretFetchError
from costreport.secrets import fetch_secret


def test_secret_json_is_returned():
    client = MagicMock()
    client.get_secret_value.return_value = {"SecretString": json.dumps({"token": "xoxb-1", "channel": "C1"})}

    assert fetch_secret("slack/cost-report", client=client) == {"token": "xoxb-1", "channel": "C1"}
    client.get_secret_value.assert_called_once_with(SecretId="slack/cost-report")


def test_missing_secret_is_a_configuration_error():
    client = MagicMock()
    client.get_secret_value.side_effect = ClientError(
        {"Error": {"Code": "ResourceNotFoundException", "Message": "not found"}}, "GetSecretValue")

    with pytest.raises(ConfigurationError):
        fetch_secret("slack/missing", client=client)


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", ""])
def test_unusable_secret_string(raw):
    client = MagicMock()
    client.get_secret_value.return_value = {"SecretString": raw}
    with pytest.raises(SecretFetchError):
        fetch_secret("slack/cost-report", client=client)
