import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List


class InvalidResultError(ValueError):
    """Raised when a malformed scored result reaches the merge step."""
    pass


@dataclass(frozen=True)
class ScoredResult:
    """
    A single provider hit.

    id: identifier of the matched entity; several results may share it.
    object: handle to the entity, passed through untouched.
    score: provider-assigned relevance, higher is better.
    """

    id: Any
    object: Any
    score: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoredResult":
        errors = validate_result_dict(data)
        if errors:
            raise InvalidResultError("; ".join(errors))
        return cls(id=data["id"], object=data.get("object"), score=data["score"])


def _is_valid_id(v: Any) -> bool:
    if v is None:
        return False
    if isinstance(v, str) and v.strip() == "":
        return False
    try:
        hash(v)
    except TypeError:
        return False
    return True


def _is_valid_score(v: Any) -> bool:
    # bool is a Real subclass but never a meaningful score
    if isinstance(v, bool) or not isinstance(v, Real):
        return False
    return not math.isnan(v)


def _check_fields(id_value: Any, score_value: Any, has_id: bool, has_score: bool) -> List[str]:
    errors: List[str] = []
    if not has_id:
        errors.append("Missing required field: id")
    elif not _is_valid_id(id_value):
        errors.append("Field 'id' must be a non-empty hashable value")

    if not has_score:
        errors.append("Missing required field: score")
    elif not _is_valid_score(score_value):
        errors.append("Field 'score' must be a number")
    return errors


def validate_result(result: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Works on anything exposing `id` and `score` attributes.
    """
    return _check_fields(
        getattr(result, "id", None),
        getattr(result, "score", None),
        hasattr(result, "id"),
        hasattr(result, "score"),
    )


def validate_result_dict(data: Dict[str, Any]) -> List[str]:
    """Same checks as validate_result, for raw provider payloads."""
    if not isinstance(data, dict):
        return ["Result payload must be a dict"]
    return _check_fields(data.get("id"), data.get("score"), "id" in data, "score" in data)


def validate_result_strict(result: Any) -> None:
    """Raise InvalidResultError if the result is malformed."""
    errors = validate_result(result)
    if errors:
        raise InvalidResultError(f"Invalid scored result {result!r}: " + "; ".join(errors))
