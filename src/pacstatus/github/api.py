from contextlib import aclosing
from datetime import datetime, timezone
import logging
from typing import Any, AsyncIterator, Dict, Optional

from gidgethub.abc import GitHubAPI

from pacstatus.github.model import CheckRun, CheckRunOutput, CommitStatus
from pacstatus.metric import record_api_call

logger = logging.getLogger("pacstatus")


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class API:
    gh: GitHubAPI
    installation: int

    call_count: int

    def __init__(self, gh: GitHubAPI, installation: int = 0):
        self.gh = gh
        self.installation = installation
        self.call_count = 0

    def _count(self, url: str) -> None:
        self.call_count += 1
        record_api_call(url)

    async def get_check_runs_for_ref(
        self, org: str, repo: str, ref: str, app_id: Optional[int] = None
    ) -> AsyncIterator[CheckRun]:
        url = f"/repos/{org}/{repo}/commits/{ref}/check-runs"
        if app_id:
            url += f"?app_id={app_id}"
        self._count(url)
        logger.debug("Get check runs for ref %s", url)
        items = self.gh.getiter(url, iterable_key="check_runs")
        async with aclosing(items):
            async for item in items:
                yield CheckRun.model_validate(item)

    async def create_check_run(
        self,
        org: str,
        repo: str,
        *,
        name: str,
        head_sha: str,
        status: str,
        details_url: str,
        external_id: str,
        started_at: datetime,
    ) -> CheckRun:
        url = f"/repos/{org}/{repo}/check-runs"
        self._count(url)
        logger.debug("Creating check run %s on sha %s", url, head_sha)
        payload = {
            "name": name,
            "head_sha": head_sha,
            "status": status,
            "external_id": external_id,
            "started_at": _format_timestamp(started_at),
        }
        if details_url:
            payload["details_url"] = details_url
        return CheckRun.model_validate(await self.gh.post(url, data=payload))

    async def update_check_run(
        self,
        org: str,
        repo: str,
        check_run_id: int,
        *,
        name: str,
        status: str,
        output: CheckRunOutput,
        conclusion: Optional[str] = None,
        completed_at: Optional[datetime] = None,
        details_url: Optional[str] = None,
        external_id: Optional[str] = None,
    ) -> None:
        url = f"/repos/{org}/{repo}/check-runs/{check_run_id}"
        self._count(url)
        payload: Dict[str, Any] = {
            "name": name,
            "status": status,
            "output": output.model_dump(exclude_none=True),
        }
        if not output.annotations:
            payload["output"].pop("annotations", None)
        if conclusion is not None:
            payload["conclusion"] = conclusion
        if completed_at is not None:
            payload["completed_at"] = _format_timestamp(completed_at)
        if details_url:
            payload["details_url"] = details_url
        if external_id:
            payload["external_id"] = external_id

        logger.debug("Updating check run %d, %s", check_run_id, url)
        await self.gh.patch(url, data=payload)

    async def create_status(
        self, org: str, repo: str, sha: str, status: CommitStatus
    ) -> None:
        url = f"/repos/{org}/{repo}/statuses/{sha}"
        self._count(url)
        logger.debug("Creating commit status %s state=%s", url, status.state)
        await self.gh.post(url, data=status.model_dump(exclude_none=True))

    async def create_issue_comment(
        self, org: str, repo: str, number: int, body: str
    ) -> None:
        url = f"/repos/{org}/{repo}/issues/{number}/comments"
        self._count(url)
        logger.debug("Commenting on #%d %s", number, url)
        await self.gh.post(url, data={"body": body})
