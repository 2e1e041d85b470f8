"""Error types and centralized error handling for Branch Outline."""

import traceback
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any, Callable, List

from logging_config import get_logger

logger = get_logger(__name__)


class BranchOutlineError(Exception):
    """Base class for errors raised while refreshing a repository."""


class RepositoryNotFoundError(BranchOutlineError):
    """A configured path is not inside any git repository."""

    def __init__(self, path: Path | str, detail: str = ""):
        self.path = str(path)
        self.detail = detail
        message = f"not a git repository: {self.path}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ExternalToolError(BranchOutlineError):
    """An external command could not be run or exited non-zero."""

    def __init__(self, command: List[str], returncode: Optional[int], stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            message = f"{' '.join(self.command)}: {stderr or 'could not be started'}"
        else:
            message = f"{' '.join(self.command)} exited with status {returncode}"
            if stderr:
                message += f": {stderr}"
        super().__init__(message)


class UnexpectedOutputError(BranchOutlineError):
    """A line of command output did not match the expected grammar."""

    def __init__(self, line: str, line_number: Optional[int] = None, reason: str = "unrecognized line"):
        self.line = line
        self.line_number = line_number
        where = f"line {line_number}" if line_number is not None else "output"
        super().__init__(f"{reason} at {where}: {line!r}")


class MalformedNumberError(BranchOutlineError):
    """An ahead/behind count is not a valid non-negative integer."""

    def __init__(self, text: str, line: str = ""):
        self.text = text
        self.line = line
        super().__init__(f"malformed commit count {text!r} in {line!r}")


# Errors that only invalidate one repository; a pass skips that repository.
REPOSITORY_ERRORS = (
    RepositoryNotFoundError,
    ExternalToolError,
    UnexpectedOutputError,
    MalformedNumberError,
)


class ErrorSeverity(Enum):
    """Error severity levels for user feedback."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for better organization."""
    REPOSITORY = "repository"
    GIT_OPERATION = "git_operation"
    OUTPUT_FORMAT = "output_format"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"
    UI_OPERATION = "ui_operation"
    UNKNOWN = "unknown"


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    technical_details: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None


def categorize(exception: Exception) -> ErrorCategory:
    """Map an exception to the category it is reported under."""
    if isinstance(exception, RepositoryNotFoundError):
        return ErrorCategory.REPOSITORY
    if isinstance(exception, ExternalToolError):
        return ErrorCategory.GIT_OPERATION
    if isinstance(exception, (UnexpectedOutputError, MalformedNumberError)):
        return ErrorCategory.OUTPUT_FORMAT
    if isinstance(exception, OSError):
        return ErrorCategory.FILE_SYSTEM
    return ErrorCategory.UNKNOWN


class ErrorHandler:
    """Centralized error handling and user notification system."""

    def __init__(self):
        self.notification_callback: Optional[Callable[[ErrorInfo], None]] = None

    def set_notification_callback(self, callback: Optional[Callable[[ErrorInfo], None]]):
        """Set callback function for user notifications."""
        self.notification_callback = callback
        logger.debug("Error notification callback registered")

    def handle_error(
        self,
        exception: Exception,
        category: Optional[ErrorCategory] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        user_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> ErrorInfo:
        """Handle an error with logging and user feedback."""
        category = category or categorize(exception)
        error_info = ErrorInfo(
            category=category,
            severity=severity,
            message=str(exception),
            user_message=user_message or self._generate_user_message(exception, category),
            technical_details="".join(traceback.format_exception(exception)),
            context=context or {},
            exception=exception,
        )

        self._log_error(error_info)

        if self.notification_callback:
            try:
                self.notification_callback(error_info)
            except Exception as e:
                logger.error(f"Error in notification callback: {e}")

        return error_info

    def handle_repository_error(
        self,
        exception: Exception,
        repo_path: Path | str,
        category_name: Optional[str] = None,
    ) -> ErrorInfo:
        """Report a repository that is skipped for the current pass."""
        context = {
            "repo_path": str(repo_path),
            "category": category_name,
        }
        return self.handle_error(
            exception=exception,
            severity=ErrorSeverity.WARNING,
            user_message=self._generate_repository_user_message(exception, repo_path),
            context=context,
        )

    def handle_file_system_error(
        self,
        exception: Exception,
        operation: str,
        file_path: Optional[Path] = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR
    ) -> ErrorInfo:
        """Handle file system errors with contextual information."""
        path_str = str(file_path) if file_path else "the specified location"
        error_msg = str(exception).lower()

        if "permission denied" in error_msg:
            user_message = f"Permission denied accessing {path_str}. Check file permissions."
        elif "no such file or directory" in error_msg:
            user_message = f"File or directory not found: {path_str}"
        else:
            user_message = f"File system operation '{operation}' failed: {exception}"

        return self.handle_error(
            exception=exception,
            category=ErrorCategory.FILE_SYSTEM,
            severity=severity,
            user_message=user_message,
            context={"operation": operation, "file_path": str(file_path) if file_path else None},
        )

    def _log_error(self, error_info: ErrorInfo):
        """Log error information based on severity."""
        log_message = f"[{error_info.category.value}] {error_info.message}"

        if error_info.context:
            log_message += f" | Context: {error_info.context}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message, exc_info=error_info.exception)
        elif error_info.severity == ErrorSeverity.ERROR:
            logger.error(log_message, exc_info=error_info.exception)
        elif error_info.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

    def _generate_user_message(self, exception: Exception, category: ErrorCategory) -> str:
        """Generate user-friendly error message."""
        if category == ErrorCategory.REPOSITORY:
            return f"Repository error: {exception}"
        elif category == ErrorCategory.GIT_OPERATION:
            return f"Git operation failed: {exception}"
        elif category == ErrorCategory.OUTPUT_FORMAT:
            return f"Unexpected git output: {exception}"
        elif category == ErrorCategory.FILE_SYSTEM:
            return f"File system error: {exception}"
        elif category == ErrorCategory.CONFIGURATION:
            return f"Configuration error: {exception}"
        elif category == ErrorCategory.UI_OPERATION:
            return f"Interface error: {exception}"
        else:
            return f"An unexpected error occurred: {exception}"

    def _generate_repository_user_message(self, exception: Exception, repo_path: Path | str) -> str:
        """Generate the warning shown for a skipped repository."""
        name = Path(repo_path).name or str(repo_path)

        if isinstance(exception, RepositoryNotFoundError):
            return f"Skipped {name}: {repo_path} is not inside a git repository."
        elif isinstance(exception, ExternalToolError):
            return f"Skipped {name}: git failed ({exception})."
        elif isinstance(exception, (UnexpectedOutputError, MalformedNumberError)):
            return f"Skipped {name}: git branch output was not understood ({exception})."
        else:
            return f"Skipped {name}: {exception}"


# Global error handler instance
_error_handler = ErrorHandler()


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    return _error_handler


def handle_error(
    exception: Exception,
    category: Optional[ErrorCategory] = None,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    user_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> ErrorInfo:
    """Convenience function to handle errors using the global handler."""
    return _error_handler.handle_error(exception, category, severity, user_message, context)
