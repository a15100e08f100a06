"""Fatal pipeline errors."""


class PipelineError(RuntimeError):
    """A stage could not complete; the pipeline stops here."""
