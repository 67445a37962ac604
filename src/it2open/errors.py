"""Exceptions raised by it2open."""


class It2OpenError(Exception):
    """Base class for all it2open errors."""


class InputError(It2OpenError):
    """No usable commands could be read from the input stream."""


class LayoutError(It2OpenError, ValueError):
    """Invalid grid parameters."""


class TemplateError(It2OpenError):
    """The operation sequence cannot be generated or rendered."""


class ExternalExecutionError(It2OpenError):
    """The script interpreter failed or could not be started."""

    def __init__(self, message: str, returncode: int = 1) -> None:
        super().__init__(message)
        self.returncode = returncode
