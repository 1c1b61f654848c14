"""
Checkpoint stores for the report steps.

A store runs a named step once per execution and replays the recorded result
on later invocations. Only successful steps are recorded, so a retried
invocation resumes at the first step that did not finish.
"""

import datetime as dt
import logging
from typing import Any, Callable, Dict, TypeVar

LOG = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryCheckpoints:
    def __init__(self):
        self.results: Dict[str, Any] = {}

    def run_step(self, name: str, fn: Callable[[], T]) -> T:
        if name in self.results:
            LOG.info("step %s replayed", name)
            return self.results[name]
        result = fn()
        self.results[name] = result
        return result


class MongoCheckpoints:
    """Step results persisted in MongoDB, keyed by (execution_id, step).

    Results must be BSON-encodable (dicts, lists, strings, numbers, None).
    """

    def __init__(self, execution_id: str, coll):
        self.execution_id = execution_id
        self._coll = coll

    def run_step(self, name: str, fn: Callable[[], T]) -> T:
        key = {"execution_id": self.execution_id, "step": name}
        doc = self._coll.find_one(key)
        if doc is not None:
            LOG.info("step %s replayed for %s", name, self.execution_id)
            return doc["result"]
        result = fn()
        record = {**key, "result": result, "completed_at": dt.datetime.now(dt.timezone.utc)}
        self._coll.update_one(key, {"$set": record}, upsert=True)
        return result
