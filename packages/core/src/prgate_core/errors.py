"""Error types raised by prgate_core.

Policy failures (a title or commit that does not match) are not errors:
run_gate() reports them through GateResult. Only broken configuration and
failed host calls are raised.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """The configured patterns or options are unusable. Raised before any host call."""


class HostRequestError(RuntimeError):
    """A call to the pull-request host failed.

    Never retried. The CLI maps this to a failed run.
    """

    def __init__(self, operation: str, message: str, status: int | None = None):
        self.operation = operation
        self.status = status
        detail = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{operation} failed{detail}: {message}")
