"""
Standard exit codes and error types for jsan.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
API_ERROR = 65           # Index backend or transport failed
CONFIG_ERROR = 66        # Configuration file error
NETWORK_ERROR = 68       # Network connection failed
DATA_ERROR = 70          # Data format or validation error
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


def exit_with_code(code: int, message: Optional[str] = None):
    """
    Exit with a specific code and optional message.

    Args:
        code: Exit code
        message: Optional message to print to stderr
    """
    import sys
    if message:
        print(message, file=sys.stderr)
    sys.exit(code)


class CommandError(Exception):
    """
    Base error for jsan, carrying the exit code to use if it escapes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class UserInputError(CommandError):
    """Raised by a shell command for bad arguments or missing records."""
    def __init__(self, message: str):
        super().__init__(message, USAGE_ERROR)


class BackendError(CommandError):
    """Raised when the index backend or the transport fails."""
    def __init__(self, message: str):
        super().__init__(message, API_ERROR)


class FatalError(CommandError):
    """Raised when the shell cannot be constructed; aborts startup."""
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message, exit_code)
