import json
from typing import Any, Dict, Mapping, Optional

from modelcall.logger import CallLogger, create_logger
from modelcall.llm.models import CallFailure, CallOutcome, FailureKind, ModelResult, WireResponse

BODY_EXCERPT_CHARS = 500


def extract_retry_after(headers: Mapping[str, str]) -> Optional[int]:
    for name, value in headers.items():
        if name.lower() == 'retry-after':
            try:
                return int(value)
            except (TypeError, ValueError):
                return None
    return None


def _body_excerpt(body: bytes) -> str:
    return body.decode('utf-8', errors='replace')[:BODY_EXCERPT_CHARS]


class ResponseParser:
    def __init__(self, logger: Optional[CallLogger] = None):
        self.logger = logger or create_logger("parser")

    def parse(self, response: WireResponse, attempts: int = 1) -> CallOutcome:
        if response.status_code >= 400:
            self.logger.debug(
                f"HTTP {response.status_code} from model API",
                status_code=response.status_code,
                kind=FailureKind.HTTP_ERROR.value
            )
            return CallFailure(
                kind=FailureKind.HTTP_ERROR,
                message=f"HTTP {response.status_code}",
                status_code=response.status_code,
                body_excerpt=_body_excerpt(response.body),
                attempts=attempts,
                retry_after=extract_retry_after(response.headers)
            )

        try:
            result = json.loads(response.body)
        except (ValueError, UnicodeDecodeError) as e:
            return self._malformed(f"Response body is not valid JSON: {e}", attempts, cause=e)

        if not isinstance(result, dict):
            return self._malformed(
                f"Expected a JSON object, got {type(result).__name__}", attempts
            )

        completion_id = result.get('id')
        if not isinstance(completion_id, str):
            return self._malformed("Missing or non-string 'id'", attempts)

        created = _as_timestamp(result.get('created'))
        if created is None:
            return self._malformed("Missing or non-integer 'created'", attempts)

        content = _first_choice_content(result)
        if not content:
            response_keys = list(result.keys())
            self.logger.debug(
                "Empty result from model API",
                kind=FailureKind.EMPTY_RESULT.value,
                error=f"response_keys={response_keys}"
            )
            return CallFailure(
                kind=FailureKind.EMPTY_RESULT,
                message="Response has no choices[0].message.content",
                attempts=attempts
            )

        usage = result.get('usage')
        model = result.get('model')

        self.logger.debug(
            f"Parsed chat completion: id={completion_id}, content_length={len(content)}",
            model=model
        )

        return ModelResult(
            id=completion_id,
            created=created,
            content=content,
            model=model if isinstance(model, str) else None,
            usage=usage if isinstance(usage, dict) else None
        )

    def _malformed(self, message: str, attempts: int, cause: BaseException = None) -> CallFailure:
        self.logger.debug(
            f"Malformed model API response: {message}",
            kind=FailureKind.MALFORMED_RESPONSE.value
        )
        return CallFailure(
            kind=FailureKind.MALFORMED_RESPONSE,
            message=message,
            cause=cause,
            attempts=attempts
        )


def _as_timestamp(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _first_choice_content(result: Dict[str, Any]) -> Optional[str]:
    try:
        content = result['choices'][0]['message']['content']
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None
