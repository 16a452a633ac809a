from __future__ import annotations

from typing import Iterable


class DeployError(RuntimeError):
    """Base error"""


class ConfigError(DeployError):
    """
    Required process configuration is missing. Raised before any I/O.
    """

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(
            "Missing required environment variables: " + ", ".join(self.missing)
        )


class InvalidSettingsError(ConfigError):
    """An ACUL_DEPLOY_* value (or .env entry) failed validation."""

    def __init__(self, detail: str) -> None:
        self.missing = ()
        self.detail = detail
        DeployError.__init__(self, f"Invalid settings: {detail}")


class ExtractionError(DeployError):
    """Asset hashes could not be resolved (build dir absent, markup changed)"""


class MissingHashesError(ExtractionError):
    def __init__(self, missing: Iterable[str], *, preview: str | None = None) -> None:
        self.missing = tuple(missing)
        self.preview = preview
        super().__init__("Missing required asset hashes: " + ", ".join(self.missing))


class ManagementApiError(DeployError):
    """
    The Management API answered a rendering update with a non-success status.
    """

    def __init__(
        self, *, prompt: str, screen: str, status_code: int, body: str
    ) -> None:
        msg = f"Failed to update {prompt}/{screen}: HTTP {status_code}"
        if body:
            msg += f": {body}"
        super().__init__(msg)
        self.prompt = prompt
        self.screen = screen
        self.status_code = status_code
        self.body = body
