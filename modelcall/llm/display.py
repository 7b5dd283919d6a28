"""
Console formatting for model call outcomes.

Standard format:
  Complete: ✅ {model}: {id}                ({time}) {tokens}
  Failure:  ❌ {kind}: {message}
"""

from typing import Optional

from rich.console import Console
from rich.text import Text

from .models import CallFailure, ModelResult

DESCRIPTION_WIDTH = 45


def format_token_count(count: int, width: int = 0) -> str:
    """
    Format token count with optional fixed width padding.

    Args:
        count: Token count to format
        width: Minimum width for right-aligned padding (0 = no padding)
    """
    if count >= 1_000_000:
        result = f"{count / 1_000_000:.1f}M"
    elif count >= 1_000:
        result = f"{count / 1_000:.1f}k"
    else:
        result = str(count)

    if width > 0:
        return result.rjust(width)
    return result


def format_token_string(usage: Optional[dict]) -> str:
    """Format usage as (in)in->(out)out, or an empty string without usage."""
    if not usage:
        return ""
    prompt_tokens = usage.get('prompt_tokens') or 0
    completion_tokens = usage.get('completion_tokens') or 0
    return f"({format_token_count(prompt_tokens)})in->({format_token_count(completion_tokens)})out"


def format_call_complete(result: ModelResult, elapsed: float) -> Text:
    text = Text()
    text.append("✅ ", style="green")

    description = f"{result.model or 'model'}: {result.id}"
    text.append(f"{description:<{DESCRIPTION_WIDTH}}", style="")

    text.append(f"({elapsed:6.1f}s)", style="dim")

    token_str = format_token_string(result.usage)
    if token_str:
        text.append(f" {token_str}", style="cyan")

    return text


def format_call_failure(failure: CallFailure) -> Text:
    text = Text()
    text.append("❌ ", style="red")
    text.append(f"{failure.kind.value}: {failure.message}", style="")
    if failure.attempts > 1:
        text.append(f" (after {failure.attempts} attempts)", style="dim")
    return text


def print_call_complete(result: ModelResult, elapsed: float, console: Optional[Console] = None):
    (console or Console(stderr=True)).print(format_call_complete(result, elapsed))


def print_call_failure(failure: CallFailure, console: Optional[Console] = None):
    (console or Console(stderr=True)).print(format_call_failure(failure))
