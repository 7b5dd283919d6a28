"""
modelcall ask command - Send one query and print the answer.
"""

import json
import sys
import time

from pydantic import ValidationError

from modelcall.config import ConfigError, load_client_config
from modelcall.logger import create_logger
from modelcall.llm import CallFailure, CancelToken, FailureKind, Query, create_provider
from modelcall.llm.display import print_call_complete, print_call_failure


def describe_failure(failure: CallFailure) -> str:
    """Translate a CallFailure into a message for the person at the terminal."""
    if failure.kind == FailureKind.NETWORK_FAILURE:
        return "Could not reach the model API. Check your connection and endpoint."
    if failure.kind == FailureKind.CANCELLATION_FAILURE:
        return "The request was cancelled before an answer arrived."
    if failure.kind == FailureKind.HTTP_ERROR:
        if failure.status_code in (401, 403):
            return "The model API rejected the credential. Check your API key."
        if failure.status_code == 429:
            wait = f" Retry after {failure.retry_after}s." if failure.retry_after else ""
            return f"The model API is rate limiting requests.{wait}"
        if failure.status_code and failure.status_code >= 500:
            return "The model API had a server error. Try again later."
        return f"The model API refused the request (HTTP {failure.status_code})."
    if failure.kind == FailureKind.EMPTY_RESULT:
        return "The model returned no answer."
    return "The model API returned a response that could not be read."


def outcome_to_dict(outcome) -> dict:
    if isinstance(outcome, CallFailure):
        return {
            "success": False,
            "kind": outcome.kind.value,
            "message": outcome.message,
            "status_code": outcome.status_code,
            "body_excerpt": outcome.body_excerpt,
            "attempts": outcome.attempts,
            "retry_after": outcome.retry_after,
        }
    return {
        "success": True,
        "id": outcome.id,
        "created": outcome.created,
        "content": outcome.content,
        "model": outcome.model,
        "usage": outcome.usage,
    }


def cmd_ask(args) -> int:
    text = sys.stdin.read() if args.text == '-' else args.text

    try:
        config = load_client_config(
            args.provider,
            timeout_seconds=args.timeout,
            max_retries=args.retries,
        )
    except (ConfigError, ValidationError) as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 2

    logger = create_logger(
        "cli",
        log_dir=args.log_dir,
        console_output=args.verbose,
        level="DEBUG" if args.verbose else "INFO"
    )

    query = Query(
        content=text,
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
    )
    cancel = CancelToken.with_deadline(args.deadline) if args.deadline else CancelToken()

    start = time.monotonic()
    try:
        with create_provider(config, logger=logger) as provider:
            if args.use_async:
                pending = provider.call_async(query, cancel=cancel)
                try:
                    outcome = pending.result()
                except KeyboardInterrupt:
                    pending.cancel("interrupted")
                    outcome = pending.result()
            else:
                try:
                    outcome = provider.call(query, cancel=cancel)
                except KeyboardInterrupt:
                    print("❌ Interrupted", file=sys.stderr)
                    return 130
        elapsed = time.monotonic() - start
        logger.info(
            "ask finished",
            model=query.model or config.model,
            kind=None if outcome.success else outcome.kind.value,
            duration_seconds=round(elapsed, 3)
        )
    finally:
        logger.close()

    if args.json:
        print(json.dumps(outcome_to_dict(outcome), indent=2))
        return 0 if outcome.success else 1

    if not outcome.success:
        print_call_failure(outcome)
        print(describe_failure(outcome), file=sys.stderr)
        return 1

    print(outcome.content)
    print_call_complete(outcome, elapsed)
    return 0
