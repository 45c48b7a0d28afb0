from __future__ import annotations


class InstallerError(RuntimeError):
    """Base class for failures that end a provisioning run."""

    exit_code = 1


class InvalidArgument(InstallerError):
    exit_code = 2


class UnsupportedPlatform(InstallerError):
    exit_code = 3


class PrivilegeRequired(InstallerError):
    exit_code = 4


class NetworkUnavailable(InstallerError):
    exit_code = 5


class DownloadVerificationFailed(InstallerError):
    exit_code = 6


class StepExecutionFailed(InstallerError):
    def __init__(self, step_id: str, error: BaseException) -> None:
        super().__init__(f"Step {step_id} failed: {error}")
        self.step_id = step_id
        self.error = error
