import logging
import re
from typing import Iterable, List, Optional, Pattern

from pacstatus.github.model import CheckRunAnnotation
from pacstatus.pipelinerun import FailedTaskLogSource, PipelineRun, TaskInfo

logger = logging.getLogger("pacstatus")

REQUIRED_GROUPS = ("filename", "line", "error")


def compile_error_pattern(pattern: str) -> Optional[Pattern[str]]:
    """Compile a user supplied error detection pattern.

    Returns ``None`` (after logging why) if the pattern does not compile or
    lacks one of the ``filename``, ``line`` and ``error`` named groups.
    """
    try:
        regex = re.compile(pattern)
    except re.error as e:
        logger.error("Invalid regexp for filtering failure messages %r: %s", pattern, e)
        return None

    missing = [g for g in REQUIRED_GROUPS if g not in regex.groupindex]
    if missing:
        logger.error(
            "Regexp for filtering failure messages does not contain the %s group(s): %r",
            ", ".join(missing),
            pattern,
        )
        return None
    return regex


def annotation_from_line(
    regex: Pattern[str], line: str
) -> Optional[CheckRunAnnotation]:
    match = regex.search(line)
    if match is None:
        return None

    groups = match.groupdict()
    filename = groups.get("filename")
    line_number = groups.get("line")
    message = groups.get("error")
    if filename is None or line_number is None or message is None:
        logger.debug("Partial match on %r, skipping", line)
        return None

    if not (line_number.isascii() and line_number.isdecimal()):
        logger.error("Cannot convert %r to an integer line number", line_number)
        return None
    start_line = int(line_number)
    if start_line < 1:
        logger.error("Line number %d is not positive", start_line)
        return None

    # GitHub does not resolve paths starting with ./
    if filename.startswith("./"):
        filename = filename[2:]

    return CheckRunAnnotation(
        path=filename,
        start_line=start_line,
        end_line=start_line,
        annotation_level="failure",
        message=message,
    )


def annotations_from_snippets(
    regex: Pattern[str], task_infos: Iterable[TaskInfo]
) -> List[CheckRunAnnotation]:
    annotations = []
    for task_info in task_infos:
        for errline in task_info.log_snippet.split("\n"):
            annotation = annotation_from_line(regex, errline)
            if annotation is not None:
                annotations.append(annotation)
    return annotations


class AnnotationExtractor:
    def __init__(self, log_source: FailedTaskLogSource):
        self.log_source = log_source

    async def extract(
        self, run: PipelineRun, pattern: str, max_lines: int
    ) -> List[CheckRunAnnotation]:
        regex = compile_error_pattern(pattern)
        if regex is None:
            return []

        task_infos = await self.log_source.collect_failed_tasks_log_snippet(
            run, max_lines
        )
        annotations = annotations_from_snippets(regex, task_infos)
        logger.debug(
            "Extracted %d annotations from %d failed tasks of %s",
            len(annotations),
            len(task_infos),
            run.name,
        )
        return annotations
