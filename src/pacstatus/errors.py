class StatusError(Exception):
    """Base class for errors surfaced by a status reconciliation."""


class ConfigurationError(StatusError):
    """No way to talk to GitHub was configured."""


class DiscoveryError(StatusError):
    """Listing the existing check runs of a commit failed."""


class PersistError(StatusError):
    """Writing the check run id back onto the pipeline run failed."""


class SubmissionError(StatusError):
    """Creating or updating a check run, status or comment failed."""
