import os
import logging
from typing import List, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Cost Explorer is only served from us-east-1
CE_REGION = os.getenv("CE_REGION", "us-east-1")
SECRETS_REGION = os.getenv("SECRETS_REGION", os.getenv("AWS_REGION", "us-east-1"))

MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB = os.getenv("MONGO_DB", "cost_report")
MONGO_COLL = os.getenv("MONGO_COLL", "checkpoints")
CHECKPOINT_TTL_DAYS = int(os.getenv("CHECKPOINT_TTL_DAYS", "7"))

REPORT_CRON_HOUR = int(os.getenv("REPORT_CRON_HOUR", "9"))
REPORT_CRON_MINUTE = int(os.getenv("REPORT_CRON_MINUTE", "1"))
REPORT_TIMEZONE = os.getenv("REPORT_TIMEZONE", "UTC")


def slack_secret_name() -> Optional[str]:
    # read per run so a missing value fails the run instead of the import
    return os.getenv("SLACK_SECRET_NAME")


def slack_timeout() -> Optional[float]:
    raw = os.getenv("SLACK_TIMEOUT_SECONDS")
    return float(raw) if raw else None


def report_types() -> List[str]:
    raw = os.getenv("REPORT_TYPES", "services")
    return [t.strip() for t in raw.split(",") if t.strip()]


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=level, format="[cost-report] %(asctime)s %(levelname)s %(name)s: %(message)s")
