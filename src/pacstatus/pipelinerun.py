from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

import pydantic

CHECK_RUN_ID_LABEL = "pipelinesascode.tekton.dev/check-run-id"
LOG_URL_ANNOTATION = "pipelinesascode.tekton.dev/log-url"

_CANCELLED = "Cancelled"
_GRACEFULLY_CANCELLED = "CancelledRunFinally"
_GRACEFULLY_STOPPED = "StoppedRunFinally"


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="ignore", populate_by_name=True)


class ObjectMeta(Model):
    name: str
    namespace: Optional[str] = None
    labels: Dict[str, str] = pydantic.Field(default_factory=dict)
    annotations: Dict[str, str] = pydantic.Field(default_factory=dict)


class Condition(Model):
    type: str
    status: str
    reason: Optional[str] = None
    message: Optional[str] = None


class PipelineRunSpec(Model):
    status: Optional[str] = None


class PipelineRunStatus(Model):
    conditions: List[Condition] = pydantic.Field(default_factory=list)
    start_time: Optional[datetime] = pydantic.Field(None, alias="startTime")
    completion_time: Optional[datetime] = pydantic.Field(
        None, alias="completionTime"
    )


class PipelineRun(Model):
    metadata: ObjectMeta
    spec: PipelineRunSpec = pydantic.Field(default_factory=PipelineRunSpec)
    status: PipelineRunStatus = pydantic.Field(default_factory=PipelineRunStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    def succeeded_condition(self) -> Optional[Condition]:
        for condition in self.status.conditions:
            if condition.type == "Succeeded":
                return condition
        return None

    def is_cancelled(self) -> bool:
        if self.spec.status == _CANCELLED:
            return True
        condition = self.succeeded_condition()
        return condition is not None and condition.reason == _CANCELLED

    def is_gracefully_cancelled(self) -> bool:
        return self.spec.status == _GRACEFULLY_CANCELLED

    def is_gracefully_stopped(self) -> bool:
        return self.spec.status == _GRACEFULLY_STOPPED

    def check_run_id(self) -> Optional[int]:
        raw = self.metadata.labels.get(CHECK_RUN_ID_LABEL)
        if raw is None:
            return None
        if not raw.isdigit():
            raise ValueError(f"Cannot convert check run id label {raw!r}")
        return int(raw)


def is_cancelled_or_stopped(run: Optional[PipelineRun]) -> bool:
    if run is None:
        return False
    return run.is_cancelled() or run.is_gracefully_cancelled() or run.is_gracefully_stopped()


def metadata_patch(check_run_id: int, log_url: str) -> Dict[str, Any]:
    return {
        "metadata": {
            "labels": {CHECK_RUN_ID_LABEL: str(check_run_id)},
            "annotations": {LOG_URL_ANNOTATION: log_url},
        }
    }


class TaskInfo(Model):
    name: str
    log_snippet: str = ""
    reason: Optional[str] = None


class PipelineRunPatcher(Protocol):
    async def patch(
        self, run: PipelineRun, patch: Dict[str, Any], what: str
    ) -> PipelineRun:
        """Merge ``patch`` into ``run`` on the cluster. Must be idempotent."""
        ...


class FailedTaskLogSource(Protocol):
    async def collect_failed_tasks_log_snippet(
        self, run: PipelineRun, max_lines: int
    ) -> Sequence[TaskInfo]:
        """Return the last ``max_lines`` log lines of every failed task of ``run``."""
        ...
