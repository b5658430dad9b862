from typing import Any, Optional

__all__ = (
    "CommandNotCreatedError",
    "DbProviderError",
    "ImproperConfigurationError",
    "InvalidParameterTypeError",
    "MissingDependencyError",
    "ProviderClosedError",
    "TransactionError",
    "UnsupportedOperationError",
)


class DbProviderError(Exception):
    """Base exception class from which all dbprovider exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``DbProviderError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class MissingDependencyError(DbProviderError, ImportError):
    """Missing driver module.

    Raised when a connection configuration names a DB-API driver module that cannot be imported.
    """

    def __init__(self, package: str, install_package: Optional[str] = None) -> None:
        super().__init__(
            f"Package {package!r} is not installed but required. You can install it by running "
            f"'pip install {install_package or package}'",
        )


class ImproperConfigurationError(DbProviderError):
    """Improper Configuration error.

    Raised when a connection name cannot be resolved or a configuration entry is malformed.
    """


class CommandNotCreatedError(DbProviderError):
    """Raised when a command operation is attempted before a command was set."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = (
                "Command not created. Call set_command_from_text or set_stored_procedure_from_text before."
            )
        super().__init__(message)


class InvalidParameterTypeError(DbProviderError):
    """Raised when a bound parameter is not a :class:`~dbprovider.parameters.DbParam`."""

    parameter_name: Optional[str]

    def __init__(self, message: Optional[str] = None, parameter_name: Optional[str] = None) -> None:
        if message is None:
            message = "Not all parameters are of type DbParam"
        detail_message = message
        if parameter_name:
            detail_message = f"{message} (Parameter: {parameter_name})"
        super().__init__(detail=detail_message)
        self.parameter_name = parameter_name


class TransactionError(DbProviderError):
    """Invalid transaction state transition, e.g. beginning a transaction while one is active."""


class ProviderClosedError(DbProviderError):
    """Raised when a closed provider is used."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Provider is closed."
        super().__init__(message)


class UnsupportedOperationError(DbProviderError):
    """The underlying driver does not support the requested operation."""
