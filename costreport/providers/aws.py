import datetime as dt
import logging
from typing import List, Dict, Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .. import config
from ..schemas import (
    AccountBilling, DateRange, GroupedBilling, GroupingMode, ServiceBilling, TotalBilling,
)

LOG = logging.getLogger(__name__)

METRIC = "AmortizedCost"

# missing keys or wrong types in a response; pydantic ValidationError is a ValueError
SHAPE_ERRORS = (KeyError, IndexError, TypeError, AttributeError, ValueError)


def _ce():
    return boto3.client("ce", region_name=config.CE_REGION)


def _time_period(date_range: DateRange) -> Dict[str, str]:
    # Cost Explorer treats End as exclusive
    end = date_range.end + dt.timedelta(days=1)
    return {"Start": date_range.start.isoformat(), "End": end.isoformat()}


def _account_label(account_id: str, attributes: List[Dict[str, Any]]) -> str:
    for attr in attributes:
        if attr.get("Value") == account_id:
            description = (attr.get("Attributes") or {}).get("description")
            if description:
                return f"{account_id} ({description})"
    return account_id


def _row(group: Dict[str, Any], mode: GroupingMode, attributes: List[Dict[str, Any]]) -> GroupedBilling:
    key = group["Keys"][0]
    cost = group["Metrics"][METRIC]
    if mode is GroupingMode.BY_ACCOUNT:
        return AccountBilling(account=_account_label(key, attributes), unit=cost["Unit"], amount=cost["Amount"])
    return ServiceBilling(service=key, unit=cost["Unit"], amount=cost["Amount"])


class CostExplorerBilling:
    """Amortized cost queries against the Cost Explorer GetCostAndUsage API."""

    def __init__(self, client=None):
        self._client = client if client is not None else _ce()

    def _query(self, date_range: DateRange, mode: Optional[GroupingMode] = None,
               token: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "TimePeriod": _time_period(date_range),
            "Granularity": "MONTHLY",
            "Metrics": [METRIC],
        }
        if mode is not None:
            params["GroupBy"] = [{"Type": "DIMENSION", "Key": mode.dimension}]
        if token:
            params["NextPageToken"] = token
        LOG.info("GetCostAndUsage request: %s", params)
        return self._client.get_cost_and_usage(**params)

    def fetch_total(self, date_range: DateRange) -> Optional[TotalBilling]:
        try:
            resp = self._query(date_range)
        except (ClientError, BotoCoreError):
            LOG.exception("total billing query failed for %s..%s", date_range.start, date_range.end)
            return None
        buckets = resp.get("ResultsByTime", [])
        if len(buckets) != 1:
            LOG.warning("total billing: expected one result bucket, got %d", len(buckets))
            return None
        try:
            cost = buckets[0]["Total"][METRIC]
            total = TotalBilling(unit=cost["Unit"], amount=cost["Amount"])
        except SHAPE_ERRORS:
            LOG.exception("total billing: unusable %s in result", METRIC)
            return None
        LOG.info("total billing: %s %s", total.amount, total.unit)
        return total

    def fetch_grouped(self, date_range: DateRange, mode: GroupingMode) -> Optional[List[GroupedBilling]]:
        """
        All grouped rows for the period, concatenated across pages in API order.
        Returns None if any page fails or has an unusable shape.
        """
        rows: List[GroupedBilling] = []
        token: Optional[str] = None
        page = 0
        while True:
            page += 1
            try:
                resp = self._query(date_range, mode, token)
            except (ClientError, BotoCoreError):
                LOG.exception("%s billing query failed on page %d", mode.value, page)
                return None
            buckets = resp.get("ResultsByTime", [])
            if len(buckets) != 1:
                LOG.warning("%s billing: page %d has %d result buckets", mode.value, page, len(buckets))
                return None
            attributes = resp.get("DimensionValueAttributes") or []
            try:
                rows.extend(_row(group, mode, attributes) for group in buckets[0].get("Groups", []))
            except SHAPE_ERRORS:
                LOG.exception("%s billing: unusable group on page %d", mode.value, page)
                return None
            token = resp.get("NextPageToken")
            if not token:
                break
        LOG.info("%s billing: %d rows over %d page(s)", mode.value, len(rows), page)
        return rows
