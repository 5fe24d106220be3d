import pytest

from pacstatus.pipelinerun import (
    CHECK_RUN_ID_LABEL,
    LOG_URL_ANNOTATION,
    PipelineRun,
    is_cancelled_or_stopped,
    metadata_patch,
)


def make_run(spec_status=None, conditions=None, labels=None):
    return PipelineRun.model_validate(
        {
            "metadata": {"name": "pr-1", "labels": labels or {}},
            "spec": {"status": spec_status},
            "status": {
                "conditions": conditions or [],
                "startTime": "2026-02-16T10:00:00Z",
            },
        }
    )


def test_not_cancelled():
    assert not is_cancelled_or_stopped(None)
    assert not is_cancelled_or_stopped(make_run())
    assert not is_cancelled_or_stopped(
        make_run(conditions=[{"type": "Succeeded", "status": "False", "reason": "Failed"}])
    )


@pytest.mark.parametrize(
    "spec_status", ["Cancelled", "CancelledRunFinally", "StoppedRunFinally"]
)
def test_cancelled_by_spec(spec_status):
    assert is_cancelled_or_stopped(make_run(spec_status=spec_status))


def test_cancelled_by_condition():
    run = make_run(
        conditions=[{"type": "Succeeded", "status": "False", "reason": "Cancelled"}]
    )
    assert run.is_cancelled()
    assert not run.is_gracefully_cancelled()
    assert is_cancelled_or_stopped(run)


def test_check_run_id_label():
    assert make_run().check_run_id() is None
    assert make_run(labels={CHECK_RUN_ID_LABEL: "123"}).check_run_id() == 123
    with pytest.raises(ValueError):
        make_run(labels={CHECK_RUN_ID_LABEL: "12a"}).check_run_id()


def test_metadata_patch():
    assert metadata_patch(42, "https://logs") == {
        "metadata": {
            "labels": {CHECK_RUN_ID_LABEL: "42"},
            "annotations": {LOG_URL_ANNOTATION: "https://logs"},
        }
    }


def test_start_time_alias():
    assert make_run().status.start_time.year == 2026
