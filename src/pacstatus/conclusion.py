from typing import Dict, Tuple

from pacstatus.github.model import StatusOpts
from pacstatus.model import PacOpts

_BY_CONCLUSION: Dict[str, Tuple[str, str]] = {
    "success": ("Success", "has <b>successfully</b> validated your commit."),
    "failure": ("Failed", "has <b>failed</b>."),
    "skipped": ("Skipped", "is skipping this commit."),
    "neutral": ("Unknown", "doesn't know what happened with this commit."),
}

_IN_PROGRESS = ("CI has Started", "is running.")


def get_check_name(status: StatusOpts, opts: PacOpts) -> str:
    if opts.application_name:
        if not status.original_pipeline_run_name:
            return opts.application_name
        return f"{opts.application_name} / {status.original_pipeline_run_name}"
    return status.original_pipeline_run_name


def title_and_summary(conclusion: str, status: str) -> Tuple[str, str]:
    """Return the display title and (unprefixed) summary for a run outcome.

    A running pipeline always reports as started, whatever its conclusion
    says. Conclusions without display text (pending, cancelled) return empty
    strings so the caller keeps what it had.
    """
    if status == "in_progress":
        return _IN_PROGRESS
    return _BY_CONCLUSION.get(conclusion, ("", ""))


def apply_conclusion(status: StatusOpts, opts: PacOpts) -> StatusOpts:
    title, summary = title_and_summary(status.conclusion, status.status)
    title = title or status.title
    summary = summary or status.summary

    on_pr = ""
    if status.original_pipeline_run_name:
        on_pr = "/" + status.original_pipeline_run_name

    return status.model_copy(
        update={
            "title": title,
            "summary": f"{opts.application_name}{on_pr} {summary}",
        }
    )
