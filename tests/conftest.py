from typing import Any, Dict, List, Optional

from costreport.schemas import PostResult


def ce_page(groups: Optional[List[tuple]] = None, token: Optional[str] = None,
            attributes: Optional[List[Dict[str, Any]]] = None, buckets: int = 1) -> Dict[str, Any]:
    """Cost Explorer GetCostAndUsage response with MONTHLY buckets."""
    result = {
        "TimePeriod": {"Start": "2023-02-01", "End": "2023-02-23"},
        "Total": {},
        "Groups": [
            {"Keys": [key], "Metrics": {"AmortizedCost": {"Amount": amount, "Unit": "USD"}}}
            for key, amount in (groups or [])
        ],
        "Estimated": True,
    }
    resp: Dict[str, Any] = {"ResultsByTime": [result] * buckets}
    if token:
        resp["NextPageToken"] = token
    if attributes is not None:
        resp["DimensionValueAttributes"] = attributes
    return resp


def ce_total(amount: str, unit: str = "USD") -> Dict[str, Any]:
    return {
        "ResultsByTime": [{
            "TimePeriod": {"Start": "2023-02-01", "End": "2023-02-23"},
            "Total": {"AmortizedCost": {"Amount": amount, "Unit": unit}},
            "Groups": [],
            "Estimated": True,
        }],
    }


class FakeNotifier:
    def __init__(self, root_ok: bool = True, thread_ok: bool = True):
        self.root_ok = root_ok
        self.thread_ok = thread_ok
        self.roots = []
        self.threads = []

    def post_root(self, channel, message):
        self.roots.append((channel, message))
        if not self.root_ok:
            return PostResult(ok=False, error="channel_not_found")
        return PostResult(ok=True, message_id="1677142860.000100")

    def post_threaded(self, channel, parent_id, message):
        self.threads.append((channel, parent_id, message))
        return PostResult(ok=self.thread_ok, error=None if self.thread_ok else "ratelimited")
