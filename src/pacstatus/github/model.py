from datetime import datetime
from typing import List, Literal, Optional

import pydantic

from pacstatus.pipelinerun import PipelineRun


class Model(pydantic.BaseModel):
    pass


Status = Literal["queued", "in_progress", "completed"]

Conclusion = Literal[
    "success",
    "failure",
    "skipped",
    "neutral",
    "pending",
    "cancelled",
]


class RunEvent(Model):
    model_config = pydantic.ConfigDict(frozen=True)

    organization: str
    repository: str
    sha: str
    event_type: str = "push"
    pull_request_number: Optional[int] = None
    installation_id: int = 0

    @property
    def is_pull_request(self) -> bool:
        return self.event_type == "pull_request"

    def __str__(self) -> str:
        return f"Event({self.organization}/{self.repository}@{self.sha[:7]})"


class StatusOpts(Model):
    pipeline_run_name: str = ""
    original_pipeline_run_name: str = ""
    status: Status = "queued"
    conclusion: Conclusion = "pending"
    details_url: str = ""
    title: str = ""
    summary: str = ""
    text: str = ""
    pipeline_run: Optional[PipelineRun] = None


class App(Model):
    id: int
    slug: str


class CheckRunAnnotation(Model):
    path: str
    start_line: int
    end_line: int
    annotation_level: Literal["notice", "warning", "failure"] = "failure"
    message: str


class CheckRunOutput(Model):
    title: Optional[str] = None
    summary: Optional[str] = None
    text: Optional[str] = None
    annotations: List[CheckRunAnnotation] = pydantic.Field(default_factory=list)


class CheckRun(Model):
    id: Optional[int] = None
    name: str
    head_sha: str
    status: Status = "queued"
    conclusion: Optional[
        Literal[
            "action_required",
            "cancelled",
            "failure",
            "neutral",
            "success",
            "skipped",
            "stale",
            "timed_out",
        ]
    ] = None
    external_id: Optional[str] = None
    details_url: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    app: Optional[App] = None
    output: Optional[CheckRunOutput] = None
    html_url: Optional[str] = None

    @property
    def is_skipped_placeholder(self) -> bool:
        """A check run previously published for a skipped commit."""
        if self.output is None:
            return False
        return (
            self.output.title == "Skipped"
            and self.output.summary is not None
            and "is skipping this commit" in self.output.summary
        )


class CommitStatus(Model):
    state: Literal["error", "failure", "pending", "success"]
    target_url: Optional[str] = None
    description: Optional[str] = None
    context: str
