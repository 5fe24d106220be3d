from __future__ import annotations

from contextlib import aclosing
from datetime import datetime, timezone
import logging
from typing import Optional, Protocol

from pacstatus.annotations import AnnotationExtractor
from pacstatus.conclusion import apply_conclusion, get_check_name
from pacstatus.errors import (
    ConfigurationError,
    DiscoveryError,
    PersistError,
    SubmissionError,
)
from pacstatus.github.api import API
from pacstatus.github.model import CheckRunOutput, CommitStatus, RunEvent, StatusOpts
from pacstatus.metric import status_report_counter
from pacstatus.model import PacOpts
from pacstatus.pipelinerun import (
    FailedTaskLogSource,
    PipelineRunPatcher,
    is_cancelled_or_stopped,
    metadata_patch,
)
from pacstatus.registry import CheckRegistry

logger = logging.getLogger("pacstatus")


class StatusReporter(Protocol):
    mode: str

    async def report(
        self, event: RunEvent, opts: PacOpts, status: StatusOpts
    ) -> Optional[int]:
        ...


class CheckRunReporter:
    """Publishes a run through the check runs API (GitHub App installations only)."""

    mode = "check_run"

    def __init__(
        self,
        api: API,
        *,
        app_id: int,
        registry: CheckRegistry,
        patcher: Optional[PipelineRunPatcher] = None,
        extractor: Optional[AnnotationExtractor] = None,
    ):
        self.api = api
        self.app_id = app_id
        self.registry = registry
        self.patcher = patcher
        self.extractor = extractor

    async def get_existing_check_run_id(
        self, event: RunEvent, status: StatusOpts
    ) -> Optional[int]:
        found = None
        try:
            check_runs = self.api.get_check_runs_for_ref(
                event.organization, event.repository, event.sha, app_id=self.app_id
            )
            async with aclosing(check_runs):
                async for check_run in check_runs:
                    if check_run.is_skipped_placeholder and check_run.id is not None:
                        if self.registry.try_claim_skip_slot(check_run.id):
                            logger.info(
                                "Taking over skipped check run %d for %s",
                                check_run.id,
                                status.pipeline_run_name,
                            )
                            found = check_run.id
                            break
                    if check_run.external_id == status.pipeline_run_name:
                        found = check_run.id
                        break
        except Exception as exc:  # noqa: BLE001
            raise DiscoveryError(
                f"Listing check runs of {event} failed: {exc}"
            ) from exc
        return found

    async def create_check_run(
        self, event: RunEvent, opts: PacOpts, status: StatusOpts
    ) -> int:
        try:
            check_run = await self.api.create_check_run(
                event.organization,
                event.repository,
                name=get_check_name(status, opts),
                head_sha=event.sha,
                status="in_progress",
                details_url=status.details_url,
                external_id=status.pipeline_run_name,
                started_at=datetime.now(timezone.utc),
            )
        except Exception as exc:  # noqa: BLE001
            raise SubmissionError(
                f"Creating check run on {event} failed: {exc}"
            ) from exc
        if check_run.id is None:
            raise RuntimeError(f"Created check run on {event} has no id")
        logger.info(
            "Created check run %d for %s on %s",
            check_run.id,
            status.pipeline_run_name,
            event,
        )
        return check_run.id

    async def persist_check_run_id(self, status: StatusOpts, check_run_id: int) -> None:
        if status.pipeline_run is None:
            return
        try:
            await self.patcher.patch(
                status.pipeline_run,
                metadata_patch(check_run_id, status.details_url),
                "checkRunID and logURL",
            )
        except Exception as exc:  # noqa: BLE001
            raise PersistError(
                f"Storing check run id {check_run_id} on "
                f"{status.pipeline_run.name} failed: {exc}"
            ) from exc

    async def build_output(self, opts: PacOpts, status: StatusOpts) -> CheckRunOutput:
        output = CheckRunOutput(
            title=status.title, summary=status.summary, text=status.text
        )
        if (
            opts.error_detection
            and status.conclusion == "failure"
            and status.pipeline_run is not None
        ):
            if self.extractor is None:
                logger.warning(
                    "Error detection enabled but no task log source configured"
                )
            else:
                output.annotations = await self.extractor.extract(
                    status.pipeline_run,
                    opts.error_detection_simple_regexp,
                    opts.error_detection_number_of_lines,
                )
        return output

    async def report(
        self, event: RunEvent, opts: PacOpts, status: StatusOpts
    ) -> Optional[int]:
        check_run_id = None
        if status.pipeline_run is not None:
            if self.patcher is None:
                raise ConfigurationError(
                    "Cannot persist the check run id, no pipeline run patcher configured"
                )
            check_run_id = status.pipeline_run.check_run_id()

        if check_run_id is None:
            check_run_id = await self.get_existing_check_run_id(event, status)
            if check_run_id is None:
                check_run_id = await self.create_check_run(event, opts, status)
            await self.persist_check_run_id(status, check_run_id)
        else:
            logger.debug(
                "Reusing check run %d stored on %s",
                check_run_id,
                status.pipeline_run_name,
            )

        output = await self.build_output(opts, status)

        conclusion = None
        completed_at = None
        if status.status == "completed" and status.conclusion != "pending":
            completed_at = datetime.now(timezone.utc)
            conclusion = status.conclusion
        if is_cancelled_or_stopped(status.pipeline_run):
            conclusion = "cancelled"

        try:
            await self.api.update_check_run(
                event.organization,
                event.repository,
                check_run_id,
                name=get_check_name(status, opts),
                status=status.status,
                output=output,
                conclusion=conclusion,
                completed_at=completed_at,
                details_url=status.details_url or None,
                external_id=status.pipeline_run_name or None,
            )
        except Exception as exc:  # noqa: BLE001
            raise SubmissionError(
                f"Updating check run {check_run_id} failed: {exc}"
            ) from exc
        return check_run_id


class CommitStatusReporter:
    """Publishes a run through the commit statuses API, used without an App."""

    mode = "commit_status"

    def __init__(self, api: API):
        self.api = api

    @staticmethod
    def status_state(status: StatusOpts) -> str:
        # statuses only know pending, success, failure and error
        if status.status == "in_progress":
            return "pending"
        if status.conclusion in ("skipped", "neutral"):
            return "success"
        if status.conclusion == "cancelled":
            return "failure"
        return status.conclusion

    async def report(
        self, event: RunEvent, opts: PacOpts, status: StatusOpts
    ) -> Optional[int]:
        commit_status = CommitStatus(
            state=self.status_state(status),
            target_url=status.details_url or None,
            description=status.title,
            context=get_check_name(status, opts),
        )
        try:
            await self.api.create_status(
                event.organization, event.repository, event.sha, commit_status
            )
        except Exception as exc:  # noqa: BLE001
            raise SubmissionError(
                f"Creating commit status on {event} failed: {exc}"
            ) from exc

        if (
            status.status == "completed"
            and status.text
            and event.is_pull_request
            and event.pull_request_number is not None
        ):
            try:
                await self.api.create_issue_comment(
                    event.organization,
                    event.repository,
                    event.pull_request_number,
                    f"{status.summary}<br>{status.text}",
                )
            except Exception as exc:  # noqa: BLE001
                raise SubmissionError(
                    f"Commenting on #{event.pull_request_number} failed: {exc}"
                ) from exc
        return None


class StatusReconciler:
    """Mirrors the state of a pipeline run onto GitHub.

    One instance lives as long as its provider session; the skipped check run
    registry is shared by every reconciliation it runs.
    """

    def __init__(
        self,
        api: Optional[API],
        *,
        app_id: int = 0,
        registry: Optional[CheckRegistry] = None,
        patcher: Optional[PipelineRunPatcher] = None,
        log_source: Optional[FailedTaskLogSource] = None,
    ):
        self.api = api
        self.app_id = app_id
        self.registry = registry or CheckRegistry()
        self.patcher = patcher
        self.log_source = log_source

    def reporter_for(self, event: RunEvent) -> StatusReporter:
        if self.api is None:
            raise ConfigurationError("Cannot set status on GitHub, no token or url set")
        if event.installation_id > 0:
            return CheckRunReporter(
                self.api,
                app_id=self.app_id,
                registry=self.registry,
                patcher=self.patcher,
                extractor=(
                    AnnotationExtractor(self.log_source)
                    if self.log_source is not None
                    else None
                ),
            )
        return CommitStatusReporter(self.api)

    async def report_status(
        self, event: RunEvent, opts: PacOpts, status: StatusOpts
    ) -> Optional[int]:
        reporter = self.reporter_for(event)
        status = apply_conclusion(status, opts)

        logger.info(
            "Reporting %s/%s for %s on %s via %s",
            status.status,
            status.conclusion,
            status.pipeline_run_name,
            event,
            reporter.mode,
        )
        try:
            check_run_id = await reporter.report(event, opts, status)
        except Exception:
            status_report_counter.labels(mode=reporter.mode, result="error").inc()
            raise
        status_report_counter.labels(mode=reporter.mode, result="ok").inc()
        return check_run_id
