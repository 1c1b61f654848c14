"""
Step sequence for one cost report run.

validate input -> validate environment -> fetch-slack-secret ->
compute-date-range -> fetch-total-billing -> fetch-detail-billings ->
post-slack-messages

Every step after validation goes through the injected checkpoint store, so a
re-invocation with the same store replays finished steps instead of redoing
them. Step results are kept JSON-compatible for persistent stores.
Configuration problems fail the run; missing billing data and delivery
problems only degrade the report.
"""

import datetime as dt
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from . import config
from .checkpoints import InMemoryCheckpoints, MongoCheckpoints
from .errors import ConfigurationError
from .metrics import record_run
from .notifier import SlackNotifier
from .period import compute_range
from .providers.aws import CostExplorerBilling
from .report import build_messages
from .schemas import (
    AccountBilling, DateRange, GroupedBilling, GroupingMode, RunResult, RunState,
    RunStatus, ServiceBilling, SlackCredential, TotalBilling,
)
from .secrets import fetch_secret

LOG = logging.getLogger(__name__)

ROW_MODELS = {
    GroupingMode.BY_SERVICE: ServiceBilling,
    GroupingMode.BY_ACCOUNT: AccountBilling,
}


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ReportOrchestrator:
    def __init__(self, billing=None, secret_fetcher: Callable[[str], Dict[str, Any]] = fetch_secret,
                 notifier_factory: Optional[Callable[[str], Any]] = None,
                 clock: Callable[[], dt.datetime] = _utcnow):
        self._billing = billing
        self._secret_fetcher = secret_fetcher
        self._notifier_factory = notifier_factory or (
            lambda token: SlackNotifier(token, timeout=config.slack_timeout()))
        self._clock = clock

    @property
    def billing(self):
        if self._billing is None:
            self._billing = CostExplorerBilling()
        return self._billing

    def run(self, event: Dict[str, Any], checkpoints, secret_name: Optional[str]) -> RunResult:
        LOG.info("event received: %s", event)
        step = "validate-input"
        try:
            mode = self._validate_input(event)
            step = "validate-environment"
            if not secret_name:
                raise ConfigurationError("missing environment variable SLACK_SECRET_NAME.")
            step = "fetch-slack-secret"
            credential = self._resolve_secret(secret_name, checkpoints)
        except ConfigurationError as e:
            LOG.error("report run failed in %s at %s: %s", RunState.VALIDATING.value, step, e)
            return RunResult(status=RunStatus.FAILED, state=RunState.FAILED,
                             failed_in=RunState.VALIDATING, failed_step=step, error=str(e))
        return self._report(mode, credential, checkpoints)

    def _report(self, mode: GroupingMode, credential: SlackCredential, checkpoints) -> RunResult:
        state = self._advance(RunState.SECRET_RESOLVED)
        try:
            date_range = DateRange.model_validate(checkpoints.run_step(
                "compute-date-range",
                lambda: compute_range(self._clock()).model_dump(mode="json"),
            ))
            LOG.info("date range: %s..%s", date_range.start, date_range.end)
            state = self._advance(RunState.RANGE_COMPUTED)

            raw_total = checkpoints.run_step(
                "fetch-total-billing",
                lambda: _dump(self.billing.fetch_total(date_range)),
            )
            total = TotalBilling.model_validate(raw_total) if raw_total is not None else None
            if total is None:
                LOG.warning("total billing unavailable; reporting unknown total")
            state = self._advance(RunState.TOTAL_FETCHED)

            raw_rows = checkpoints.run_step(
                "fetch-detail-billings",
                lambda: _dump_rows(self.billing.fetch_grouped(date_range, mode)),
            )
            details = _load_rows(raw_rows, mode)
            if details is None:
                LOG.warning("%s breakdown unavailable; posting without fields", mode.value)
            state = self._advance(RunState.DETAIL_FETCHED)

            delivery = checkpoints.run_step(
                "post-slack-messages",
                lambda: self._notify(credential, date_range, total, details, mode),
            )
            self._advance(RunState.NOTIFIED)
        except Exception:
            LOG.exception("report run aborted after %s; finished steps replay on the next invocation",
                          state.value)
            raise

        return RunResult(
            status=RunStatus.SUCCEEDED,
            state=self._advance(RunState.SUCCEEDED),
            date_range=date_range,
            total=total,
            detail_count=len(details) if details is not None else None,
            root_posted=delivery["root_posted"],
            thread_posted=delivery["thread_posted"],
        )

    @staticmethod
    def _advance(state: RunState) -> RunState:
        LOG.info("state -> %s", state.value)
        return state

    @staticmethod
    def _validate_input(event: Dict[str, Any]) -> GroupingMode:
        report_type = (event or {}).get("type")
        if not report_type:
            raise ConfigurationError("missing input variable type")
        mode = GroupingMode.parse(report_type)
        if mode is None:
            raise ConfigurationError("invalid input variable type. Valid values are accounts or services.")
        return mode

    def _resolve_secret(self, secret_name: str, checkpoints) -> SlackCredential:
        # validated inside the step so an incomplete secret is never recorded as done
        value = checkpoints.run_step(
            "fetch-slack-secret",
            lambda: _checked_secret(self._secret_fetcher(secret_name)),
        )
        return SlackCredential(token=value["token"], channel=value["channel"])

    def _notify(self, credential: SlackCredential, date_range: DateRange, total: Optional[TotalBilling],
                details: Optional[List[GroupedBilling]], mode: GroupingMode) -> Dict[str, bool]:
        messages = build_messages(date_range, total, details, mode)
        notifier = self._notifier_factory(credential.token)
        root = notifier.post_root(credential.channel, messages.root)
        if not root.ok:
            # TODO: surface a skipped breakdown as its own outcome once the trigger layer can act on it
            LOG.warning("root message not delivered (%s); breakdown not posted", root.error)
            return {"root_posted": False, "thread_posted": False}
        thread = notifier.post_threaded(credential.channel, root.message_id, messages.thread)
        if not thread.ok:
            LOG.warning("breakdown not delivered (%s)", thread.error)
        return {"root_posted": True, "thread_posted": thread.ok}


def _checked_secret(value) -> Dict[str, str]:
    token = (value or {}).get("token")
    channel = (value or {}).get("channel")
    if not isinstance(token, str) or not token or not isinstance(channel, str) or not channel:
        raise ConfigurationError("Slack secret must contain token and channel.")
    return {"token": token, "channel": channel}


def _dump(model) -> Optional[Dict[str, Any]]:
    return model.model_dump(mode="json") if model is not None else None


def _dump_rows(rows) -> Optional[List[Dict[str, Any]]]:
    if rows is None:
        return None
    return [row.model_dump(mode="json") for row in rows]


def _load_rows(raw, mode: GroupingMode) -> Optional[List[GroupedBilling]]:
    if raw is None:
        return None
    model = ROW_MODELS[mode]
    return [model.model_validate(row) for row in raw]


def build_checkpoints(execution_id: str):
    if not config.MONGO_URI:
        return InMemoryCheckpoints()
    from .db.mongo_connector import get_coll, ensure_indexes
    coll = get_coll()
    ensure_indexes(coll)
    return MongoCheckpoints(execution_id, coll)


def run_report(report_type: Optional[str], execution_id: Optional[str] = None,
               orchestrator: Optional[ReportOrchestrator] = None, checkpoints=None) -> RunResult:
    execution_id = execution_id or str(uuid.uuid4())
    orchestrator = orchestrator or ReportOrchestrator()
    checkpoints = checkpoints if checkpoints is not None else build_checkpoints(execution_id)
    LOG.info("starting %s report, execution %s", report_type, execution_id)
    result = orchestrator.run({"type": report_type}, checkpoints, config.slack_secret_name())
    record_run(report_type, result)
    return result
