import logging
from typing import Optional

from prometheus_client import Counter, Gauge, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST

from .schemas import RunResult, RunStatus

LOG = logging.getLogger(__name__)

registry = CollectorRegistry()
runs_counter = Counter("cost_report_runs", "Cost report runs by outcome", ["type", "status"], registry=registry)
total_gauge = Gauge("cost_report_total_amount", "Total cost of the last reported period", ["type", "unit"], registry=registry)
detail_rows_gauge = Gauge("cost_report_detail_rows", "Breakdown rows in the last report", ["type"], registry=registry)
delivery_failures = Counter("cost_report_delivery_failures", "Slack posts that did not go through", ["type"], registry=registry)


def record_run(report_type: Optional[str], result: RunResult):
    label = report_type or "unknown"
    runs_counter.labels(type=label, status=result.status.value).inc()
    if result.status is not RunStatus.SUCCEEDED:
        return
    if result.total is not None:
        try:
            total_gauge.labels(type=label, unit=result.total.unit).set(float(result.total.amount))
        except ValueError:
            LOG.warning("total amount %r is not numeric; gauge not updated", result.total.amount)
    detail_rows_gauge.labels(type=label).set(result.detail_count or 0)
    if not (result.root_posted and result.thread_posted):
        delivery_failures.labels(type=label).inc()


def scrape_metrics():
    return generate_latest(registry), CONTENT_TYPE_LATEST
