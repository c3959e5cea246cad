class AdminToolsError(RuntimeError):
    """Base class for errors raised by the admin tools."""


class MetricQueryError(AdminToolsError):
    """A metric provider (CIM, registry, psutil) could not answer for a host."""

    def __init__(self, host: str, message: str):
        super().__init__(f"{host}: {message}")
        self.host = host


class GenerationError(AdminToolsError):
    """Random string generation gave up before satisfying its constraints."""
