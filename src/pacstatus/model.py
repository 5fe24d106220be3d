import io
from pathlib import Path
from typing import Optional, Union

import pydantic
import yaml

DEFAULT_APPLICATION_NAME = "Pipelines as Code CI"
DEFAULT_ERROR_DETECTION_SIMPLE_REGEXP = (
    r"^(?P<filename>[^:]*):(?P<line>[0-9]+):(?:(?P<column>[0-9]+):)?([ ]*)?(?P<error>.*)"
)
DEFAULT_ERROR_DETECTION_NUMBER_OF_LINES = 50


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="forbid", populate_by_name=True)


class PacOpts(Model):
    application_name: str = pydantic.Field(
        DEFAULT_APPLICATION_NAME, alias="application-name"
    )
    error_detection: bool = pydantic.Field(
        False, alias="error-detection-from-container-logs"
    )
    error_detection_simple_regexp: str = pydantic.Field(
        DEFAULT_ERROR_DETECTION_SIMPLE_REGEXP, alias="error-detection-simple-regexp"
    )
    error_detection_number_of_lines: int = pydantic.Field(
        DEFAULT_ERROR_DETECTION_NUMBER_OF_LINES,
        alias="error-detection-max-number-of-lines",
        gt=0,
    )


class InvalidSettings(Exception):
    raw_settings: str
    source: str

    def __init__(self, *args, **kwargs):
        self.raw_settings = kwargs.pop("raw_settings")
        self.source = kwargs.pop("source")
        super().__init__(*args, **kwargs)


def load_pac_opts(path: Optional[Union[str, Path]] = None) -> PacOpts:
    if path is None:
        return PacOpts()

    raw = Path(path).read_text()
    data = yaml.safe_load(io.StringIO(raw))

    try:
        return PacOpts() if data is None else PacOpts.model_validate(data)
    except pydantic.ValidationError as e:
        raise InvalidSettings(str(e), raw_settings=raw, source=str(path))
