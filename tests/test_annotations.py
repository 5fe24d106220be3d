import logging

import pytest

from pacstatus.annotations import (
    AnnotationExtractor,
    annotation_from_line,
    annotations_from_snippets,
    compile_error_pattern,
)
from pacstatus.model import DEFAULT_ERROR_DETECTION_SIMPLE_REGEXP
from pacstatus.pipelinerun import PipelineRun, TaskInfo

SIMPLE = r"^(?P<filename>[^:]+):(?P<line>[^:]+): (?P<error>.*)$"


class _StaticLogSource:
    def __init__(self, task_infos):
        self.task_infos = task_infos
        self.calls = 0

    async def collect_failed_tasks_log_snippet(self, run, max_lines):
        self.calls += 1
        return self.task_infos


def make_run():
    return PipelineRun.model_validate({"metadata": {"name": "pr-1"}})


def test_single_line():
    regex = compile_error_pattern(SIMPLE)
    annotation = annotation_from_line(regex, "main.go:42: syntax error near 'x'")

    assert annotation is not None
    assert annotation.path == "main.go"
    assert annotation.start_line == 42
    assert annotation.end_line == 42
    assert annotation.message == "syntax error near 'x'"
    assert annotation.annotation_level == "failure"


def test_leading_dot_slash_is_stripped():
    regex = compile_error_pattern(SIMPLE)
    annotation = annotation_from_line(regex, "./pkg/foo.go:3: boom")
    assert annotation.path == "pkg/foo.go"


def test_skips_unmatched_and_non_numeric_lines():
    regex = compile_error_pattern(SIMPLE)
    assert annotation_from_line(regex, "nothing to see here") is None
    assert annotation_from_line(regex, "foo.go:N/A: boom") is None
    assert annotation_from_line(regex, "foo.go:0: boom") is None


@pytest.mark.parametrize("line_number", ["4_2", " 42", "42 ", "\u0664\u0662", "+42", "-3"])
def test_skips_line_numbers_that_are_not_plain_digits(line_number):
    regex = compile_error_pattern(SIMPLE)
    assert annotation_from_line(regex, f"foo.go:{line_number}: boom") is None


def test_default_pattern():
    regex = compile_error_pattern(DEFAULT_ERROR_DETECTION_SIMPLE_REGEXP)

    with_column = annotation_from_line(regex, "./src/app.py:10:5: E501 line too long")
    assert with_column.path == "src/app.py"
    assert with_column.start_line == 10
    assert with_column.message == "E501 line too long"

    without_column = annotation_from_line(regex, "main.go:42: syntax error")
    assert without_column.start_line == 42
    assert without_column.message == "syntax error"


def test_order_follows_tasks_and_lines():
    regex = compile_error_pattern(SIMPLE)
    task_infos = [
        TaskInfo(name="build", log_snippet="a.go:1: first\nnoise\nb.go:2: second"),
        TaskInfo(name="test", log_snippet="c.go:N/A: ignored\nc.go:3: third"),
    ]

    annotations = annotations_from_snippets(regex, task_infos)

    assert [(a.path, a.start_line, a.message) for a in annotations] == [
        ("a.go", 1, "first"),
        ("b.go", 2, "second"),
        ("c.go", 3, "third"),
    ]


def test_invalid_pattern(caplog):
    with caplog.at_level(logging.ERROR, logger="pacstatus"):
        assert compile_error_pattern("(?P<filename>") is None
    assert "Invalid regexp" in caplog.text


def test_missing_group_is_reported_once(caplog):
    with caplog.at_level(logging.ERROR, logger="pacstatus"):
        assert compile_error_pattern(r"(?P<filename>\S+):(?P<line>\d+)") is None

    assert len(caplog.records) == 1
    assert "error" in caplog.records[0].getMessage()


@pytest.mark.asyncio
async def test_extractor_reads_failed_task_logs():
    source = _StaticLogSource(
        [TaskInfo(name="lint", log_snippet="x.py:7: bad\nx.py:8: worse")]
    )
    extractor = AnnotationExtractor(source)

    annotations = await extractor.extract(make_run(), SIMPLE, 50)

    assert source.calls == 1
    assert [a.start_line for a in annotations] == [7, 8]


@pytest.mark.asyncio
async def test_extractor_does_not_read_logs_with_bad_pattern():
    source = _StaticLogSource([TaskInfo(name="lint", log_snippet="x.py:7: bad")])
    extractor = AnnotationExtractor(source)

    assert await extractor.extract(make_run(), "(", 50) == []
    assert source.calls == 0
