#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the eml2md library.

This module defines specialized exception classes for the error conditions
that can occur while converting email documents. Malformed email content is
normally tolerated by the parser; these exceptions cover invalid arguments,
file system failures and the few structural limits the parser enforces.

Exception Hierarchy
-------------------
- Eml2MdError (base exception)

  - ValidationError (parameter/option validation)

  - FileError (file access and I/O)
    - FileNotFoundError (file doesn't exist)
    - MalformedFileError (document structure exceeds parser limits)
    - OutputWriteError (note or attachment write failures)

  - DependencyError (missing optional packages)

"""

from typing import Any


class Eml2MdError(Exception):
    """Base exception class for all eml2md-specific errors.

    Catching this will catch all library-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Eml2MdError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    parameter_name : str or None
        The name of the problematic parameter
    parameter_value : any
        The value that caused the error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class FileError(Eml2MdError):
    """Base exception for file access and I/O errors.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the problematic file
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    file_path : str or None
        Path to the file that caused the error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path and message."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class FileNotFoundError(FileError):
    """Exception raised when an input file cannot be found.

    Parameters
    ----------
    file_path : str
        Path to the file that was not found
    message : str, optional
        Custom error message. If not provided, uses default message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file not found error."""
        if message is None:
            message = f"File not found: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class MalformedFileError(FileError):
    """Exception raised when a document's structure cannot be processed safely.

    The email parser tolerates almost every kind of malformed input. This error
    is reserved for structural limits, such as multipart nesting deeper than
    the configured maximum.

    Parameters
    ----------
    message : str
        Description of what is malformed
    file_path : str, optional
        Path to the malformed file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the malformed file error."""
        super().__init__(message, file_path=file_path, original_error=original_error)


class OutputWriteError(FileError):
    """Exception raised when writing a note or attachment fails.

    Parameters
    ----------
    file_path : str
        Path to the output file that failed to write
    message : str, optional
        Custom error message. If not provided, uses default message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the output write error."""
        if message is None:
            message = f"Failed to write output file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class DependencyError(Eml2MdError):
    """Exception raised when an optional dependency is not installed.

    Parameters
    ----------
    feature : str
        Name of the feature requiring the dependency (e.g., "watch")
    missing_packages : list[str]
        Distribution names of the packages that need to be installed
    extra : str, optional
        Name of the eml2md extra that provides the packages
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_import_error : ImportError, optional
        The ImportError raised when the package was imported

    Attributes
    ----------
    feature : str
        The feature that has missing dependencies
    missing_packages : list[str]
        Packages that need to be installed
    install_command : str
        Command to install missing dependencies

    """

    def __init__(
        self,
        feature: str,
        missing_packages: list[str],
        extra: str | None = None,
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        if extra:
            install_command = f'pip install "eml2md[{extra}]"'
        else:
            install_command = "pip install " + " ".join(missing_packages)
        if message is None:
            pkg_list = ", ".join(f"'{name}'" for name in missing_packages)
            message = f"{feature} requires the following packages: {pkg_list}\nInstall with: {install_command}"

        super().__init__(message, original_error=original_import_error)
        self.feature = feature
        self.missing_packages = missing_packages
        self.install_command = install_command
