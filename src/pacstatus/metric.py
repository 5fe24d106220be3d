import re

from prometheus_client import CollectorRegistry, Counter

push_registry = CollectorRegistry()

api_call_count = Counter(
    "pacstatus_num_api_calls",
    "Total number of GitHub API calls",
    labelnames=["endpoint"],
    registry=push_registry,
)

status_report_counter = Counter(
    "pacstatus_status_report",
    "Number of status reconciliations",
    labelnames=["mode", "result"],
    registry=push_registry,
)

skipped_check_reuse_counter = Counter(
    "pacstatus_skipped_check_reuse",
    "Attempts to reuse a skipped check run",
    labelnames=["result"],
    registry=push_registry,
)

_REPO_PREFIX = re.compile(r"^/repos/[^/]+/[^/]+/")


def _normalize_api_endpoint(endpoint: str) -> str:
    endpoint = _REPO_PREFIX.sub("", endpoint.split("?", 1)[0])
    if endpoint.startswith("/app/installations/"):
        return "installation_token"
    if endpoint.startswith("commits/") and endpoint.endswith("/check-runs"):
        return "commits/check-runs"
    if endpoint.startswith("check-runs/"):
        return "check-runs/xxx"
    if endpoint.startswith("statuses/"):
        return "statuses"
    if endpoint.startswith("issues/") and endpoint.endswith("/comments"):
        return "issues/comments"
    return endpoint


def record_api_call(endpoint: str) -> None:
    api_call_count.labels(endpoint=_normalize_api_endpoint(endpoint)).inc()
