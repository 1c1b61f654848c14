# costreport/scheduler/cron_job.py
import argparse
import datetime as dt
import logging
import sys
from typing import List, Optional

from apscheduler.schedulers.blocking import BlockingScheduler

from costreport import config
from costreport.orchestrator import run_report
from costreport.schemas import RunStatus

LOG = logging.getLogger("costreport.scheduler")


def execution_id(report_type: str, today: Optional[dt.date] = None) -> str:
    # same id for the whole day so a retried trigger resumes the earlier run
    today = today or dt.datetime.now(dt.timezone.utc).date()
    return f"cost-report-{report_type}-{today.isoformat()}"


def run_once(report_type: str) -> bool:
    result = run_report(report_type, execution_id(report_type))
    if result.status is RunStatus.FAILED:
        LOG.error("%s report failed: %s", report_type, result.error)
        return False
    LOG.info("%s report done (root posted: %s, breakdown posted: %s)",
             report_type, result.root_posted, result.thread_posted)
    return True


def build_scheduler(report_types: List[str]) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone=config.REPORT_TIMEZONE)
    for report_type in report_types:
        scheduler.add_job(
            run_once, "cron", args=[report_type], id=f"cost-report-{report_type}",
            hour=config.REPORT_CRON_HOUR, minute=config.REPORT_CRON_MINUTE,
        )
    return scheduler


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Post the AWS cost report to Slack")
    parser.add_argument("--once", action="store_true")
    parser.add_argument("--type", dest="report_type", default=None,
                        help="accounts or services (default: REPORT_TYPES)")
    args = parser.parse_args(argv)
    config.configure_logging()

    report_types = [args.report_type] if args.report_type else config.report_types()
    if args.once:
        results = [run_once(t) for t in report_types]
        return 0 if all(results) else 1

    LOG.info("scheduler starting: %s at %02d:%02d %s", ",".join(report_types),
             config.REPORT_CRON_HOUR, config.REPORT_CRON_MINUTE, config.REPORT_TIMEZONE)
    build_scheduler(report_types).start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
