"""Error taxonomy. Every error is terminal for a report run."""


class ReportError(Exception):
    """Base class for failures that abort report generation."""


class DataUnavailableError(ReportError):
    """The source dataset is missing, unreadable or empty."""


class SchemaMismatchError(ReportError):
    """A stage received a frame lacking a column it needs."""


class EmptyDatasetError(ReportError):
    """A stage received a frame with no rows."""


class DegenerateSplitError(ReportError):
    """The target has too few classes or records to stratify or fit."""


class DegenerateResampleWarning(UserWarning):
    """An out-of-bag set holds a single class, so its AUC is undefined."""
