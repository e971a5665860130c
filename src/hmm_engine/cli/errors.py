"""
Error handling for CLI commands.

Defines CLI exceptions and helpers that turn failures into readable messages.
"""

import traceback
from typing import List, Optional

import typer
from rich.console import Console

from ..exceptions import InvalidConfigurationError, InvalidObservationError
from ..logger import get_logger

console = Console()
logger = get_logger(__name__)


# Exit codes for different error types
EXIT_CODES = {
    "success": 0,
    "general_error": 1,
    "invalid_usage": 2,
    "config_error": 13,
    "observation_error": 14
}


class HMMEngineCLIError(Exception):
    """Base exception for CLI-specific errors."""

    def __init__(self, message: str, exit_code: int = 1, suggestions: Optional[list] = None):
        self.message = message
        self.exit_code = exit_code
        self.suggestions = suggestions or []
        super().__init__(message)


class UsageError(HMMEngineCLIError):
    """Invalid command-line input."""

    def __init__(self, message: str, suggestions: Optional[list] = None):
        super().__init__(message, exit_code=EXIT_CODES["invalid_usage"], suggestions=suggestions)


def _exit_code_for(error: Exception) -> int:
    if isinstance(error, HMMEngineCLIError):
        return error.exit_code
    if isinstance(error, InvalidObservationError):
        return EXIT_CODES["observation_error"]
    if isinstance(error, InvalidConfigurationError):
        return EXIT_CODES["config_error"]
    return EXIT_CODES["general_error"]


def format_error_message(error: Exception, operation: str, debug: bool = False) -> str:
    """Format error message with context and suggestions."""
    error_type = type(error).__name__

    message_parts = [
        f"[red]Error during {operation}:[/red]",
        f"[red]{error_type}: {error}[/red]"
    ]

    suggestions = getattr(error, 'suggestions', None)
    if suggestions:
        message_parts.append("")
        message_parts.append("[yellow]Suggestions:[/yellow]")
        for suggestion in suggestions:
            message_parts.append(f"  • {suggestion}")

    if debug:
        message_parts.append("")
        message_parts.append("[dim]Debug information:[/dim]")
        message_parts.append(f"[dim]{traceback.format_exc()}[/dim]")

    return "\n".join(message_parts)


def handle_cli_error(error: Exception, operation: str, debug: bool = False) -> None:
    """Display an error with rich formatting and exit with the matching code."""
    exit_code = _exit_code_for(error)

    console.print(format_error_message(error, operation, debug))
    console.print(f"\n[dim]For more help, run: hmm-engine {operation.split()[0]} --help[/dim]")

    logger.error(f"CLI error in {operation}: {error}", exc_info=debug)

    raise typer.Exit(exit_code)


def validate_observation_text(text: str) -> List[str]:
    """Split a whitespace-separated observation string into tokens."""
    tokens = text.split()
    if not tokens:
        raise UsageError(
            "Please enter an observation sequence",
            suggestions=[
                'Separate symbols with spaces: hmm-engine fit "W H H W H"',
                "Any token works as a symbol; the alphabet is built from the sequence"
            ]
        )
    return tokens
