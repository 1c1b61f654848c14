"""
Slack delivery for the cost report.

Thin chat.postMessage sender. No retries: a failed post is returned as
ok=False and left to the caller.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .schemas import PostResult, RootMessage, ThreadMessage

LOG = logging.getLogger(__name__)

POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


class SlackNotifier:
    def __init__(self, token: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        self._token = token
        self._session = session or requests.Session()
        self._timeout = timeout

    def _post(self, payload: Dict[str, Any]) -> PostResult:
        try:
            resp = self._session.post(
                POST_MESSAGE_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self._token}"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as e:
            LOG.exception("chat.postMessage failed")
            return PostResult(ok=False, error=str(e))
        if not body.get("ok"):
            LOG.warning("chat.postMessage rejected: %s", body.get("error"))
            return PostResult(ok=False, error=body.get("error"))
        return PostResult(ok=True, message_id=body.get("ts"))

    def post_root(self, channel: str, message: RootMessage) -> PostResult:
        payload = {"channel": channel, **message.model_dump(exclude_none=True)}
        return self._post(payload)

    def post_threaded(self, channel: str, parent_id: str, message: ThreadMessage) -> PostResult:
        payload = {"channel": channel, "thread_ts": parent_id, **message.model_dump(exclude_none=True)}
        result = self._post(payload)
        return PostResult(ok=result.ok, error=result.error)
