"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that should halt in strict mode."""

    error_code = "STAGE_ERROR"


class SchemaMismatch(PipelineError):
    """Raised when a dataset's columns do not line up with the declared schema."""

    error_code = "SCHEMA_MISMATCH"


class IngestFailure(PipelineError):
    """Raised when a spreadsheet cannot be read."""

    error_code = "INGEST_FAILURE"
