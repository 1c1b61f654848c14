# costreport/db/mongo_connector.py
from pymongo import MongoClient, ASCENDING

from .. import config

_client = None


def _mongo():
    global _client
    if _client is None:
        _client = MongoClient(config.MONGO_URI)
    return _client


def get_db():
    return _mongo()[config.MONGO_DB]


def get_coll():
    return get_db()[config.MONGO_COLL]


def ensure_indexes(coll=None):
    coll = coll if coll is not None else get_coll()
    # unique key keeps replays idempotent (one document per execution/step)
    coll.create_index(
        [("execution_id", ASCENDING), ("step", ASCENDING)],
        unique=True,
        name="uniq_execution_step",
    )
    # checkpoints hold the Slack token; expire them once no retry can need them
    coll.create_index(
        [("completed_at", ASCENDING)],
        name="completed_at_ttl",
        expireAfterSeconds=config.CHECKPOINT_TTL_DAYS * 86400,
    )
