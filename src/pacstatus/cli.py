import asyncio
from enum import Enum
import json
import logging
from pathlib import Path
from typing import List, Optional

import pydantic
import typer
from prometheus_client import push_to_gateway

from pacstatus import config
from pacstatus.client import installation_api
from pacstatus.errors import StatusError
from pacstatus.formatting import TaskRun, render_task_status
from pacstatus.github.status import StatusReconciler
from pacstatus.github.model import RunEvent, StatusOpts
from pacstatus.logger import get_log_handlers
from pacstatus.metric import push_registry
from pacstatus.model import InvalidSettings, load_pac_opts

logging.basicConfig(
    format="%(asctime)s %(name)s %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger("pacstatus")


class RunStatus(str, Enum):
    queued = "queued"
    in_progress = "in_progress"
    completed = "completed"


class RunConclusion(str, Enum):
    success = "success"
    failure = "failure"
    skipped = "skipped"
    neutral = "neutral"
    pending = "pending"
    cancelled = "cancelled"


app = typer.Typer()


@app.callback()
def init():
    logging.getLogger().setLevel(config.OVERRIDE_LOGGING)
    logger.setLevel(config.OVERRIDE_LOGGING)
    get_log_handlers(logger)


def load_task_runs(path: Path) -> str:
    adapter = pydantic.TypeAdapter(List[TaskRun])
    return render_task_status(adapter.validate_json(path.read_text()))


@app.command()
def settings(path: Path):
    """Validate a settings file and print the effective values."""
    try:
        opts = load_pac_opts(path)
    except InvalidSettings as e:
        typer.echo(f"Invalid settings in {e.source}:\n{e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(opts.model_dump(by_alias=True), indent=2))


@app.command()
def report(
    repo: str = typer.Argument(..., help="org/repo"),
    sha: str = typer.Argument(...),
    run_name: str = typer.Option(..., "--run-name"),
    original_name: str = typer.Option("", "--original-name"),
    status: RunStatus = typer.Option(RunStatus.completed, "--status"),
    conclusion: RunConclusion = typer.Option(RunConclusion.pending, "--conclusion"),
    details_url: str = typer.Option("", "--details-url"),
    text: str = typer.Option("", "--text"),
    event_type: str = typer.Option("push", "--event-type"),
    pull_request: Optional[int] = typer.Option(None, "--pull-request"),
    installation: int = typer.Option(0, "--installation"),
    settings_file: Optional[Path] = typer.Option(
        config.PAC_SETTINGS_FILE, "--settings"
    ),
    tasks_file: Optional[Path] = typer.Option(None, "--tasks-file"),
):
    """Publish the state of one pipeline run to GitHub."""
    org, _, repository = repo.partition("/")
    event = RunEvent(
        organization=org,
        repository=repository,
        sha=sha,
        event_type=event_type,
        pull_request_number=pull_request,
        installation_id=installation,
    )
    try:
        opts = load_pac_opts(settings_file)
    except InvalidSettings as e:
        typer.echo(f"Invalid settings in {e.source}:\n{e}", err=True)
        raise typer.Exit(code=1)

    if tasks_file is not None:
        table = load_task_runs(tasks_file)
        text = f"{text}\n\n{table}" if text else table

    status_opts = StatusOpts(
        pipeline_run_name=run_name,
        original_pipeline_run_name=original_name,
        status=status.value,
        conclusion=conclusion.value,
        details_url=details_url,
        text=text,
    )

    async def handle():
        async with installation_api(installation) as api:
            reconciler = StatusReconciler(api, app_id=config.GITHUB_APP_ID)
            check_run_id = await reconciler.report_status(event, opts, status_opts)
            logger.info(
                "Reported %s on %s, check run: %s, API calls: %d",
                run_name,
                event,
                check_run_id,
                api.call_count,
            )

    try:
        asyncio.run(handle())
    except StatusError as e:
        logger.error("Reporting status failed: %s", e, exc_info=True)
        raise typer.Exit(code=1)
    finally:
        if config.PUSH_GATEWAY is not None:
            push_to_gateway(config.PUSH_GATEWAY, job="pacstatus", registry=push_registry)
