"""Exceptions raised by railsbox.

Every failure is raised at the step that detects it and propagates to the
caller of ``RailsSession.run``. Only the running flag and the ambient
process state are restored on the way out.
"""


class RailsboxError(Exception):
    """Base class for all railsbox failures."""

    pass


class ConstructionError(RailsboxError, ValueError):
    """Raised when a session is built with an invalid Rails environment."""

    pass


class PreconditionError(RailsboxError):
    """Raised when an operation needs a running session and there isn't one."""

    pass


class CommandError(RailsboxError):
    """Raised when an external command exits non-zero or prints the wrong thing."""

    def __init__(
        self,
        message: str,
        command: str,
        output: str = "",
        returncode: int | None = None,
        what_we_were_doing: str | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.output = output
        self.returncode = returncode
        self.what_we_were_doing = what_we_were_doing


class ProvisioningError(RailsboxError):
    """Base class for failures while building the target project."""

    pass


class VersionDetectionError(ProvisioningError):
    """Raised when ``rails --version`` can't be run or parsed."""

    pass


class VersionMismatchError(ProvisioningError):
    """Raised when the installed project reports a different Rails version."""

    def __init__(self, detected: str, installed: str) -> None:
        super().__init__(
            f"The Rails project we created reports itself as version '{installed}', "
            f"but 'rails --version' gave us '{detected}'."
        )
        self.detected = detected
        self.installed = installed


class FilesystemError(ProvisioningError):
    """Raised when a directory can't be created or removed."""

    pass


class GenerationError(ProvisioningError):
    """Raised when the Rails project generator fails."""

    pass


class InstallError(ProvisioningError):
    """Raised when ``bundle install`` fails."""

    pass


class ConfigError(ProvisioningError):
    """Raised when a generated config file can't be adapted."""

    pass
