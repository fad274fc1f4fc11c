from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    path: str
    message: str


class ValidationError(ValueError):
    def __init__(self, issues: Iterable[ValidationIssue]):
        self.issues = tuple(issues)
        msg = "; ".join(f"{i.path}: {i.message}" for i in self.issues) or "validation failed"
        super().__init__(msg)


def as_mapping(value: Any, *, path: str) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    raise ValidationError([ValidationIssue(path, "expected a mapping/object")])


def as_list(value: Any, *, path: str) -> list[Any]:
    if isinstance(value, list):
        return value
    raise ValidationError([ValidationIssue(path, "expected a list")])


def as_int(value: Any, *, path: str) -> int:
    # bool is an int subclass; `true` in YAML is never a line count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError([ValidationIssue(path, "expected an integer")])
    return value


def as_number(value: Any, *, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError([ValidationIssue(path, "expected a number")])
    return float(value)


def as_str(value: Any, *, path: str) -> str:
    if isinstance(value, str):
        return value
    raise ValidationError([ValidationIssue(path, "expected a string")])


def require_positive_int(value: Any, *, path: str) -> int:
    i = as_int(value, path=path)
    if i <= 0:
        raise ValidationError([ValidationIssue(path, "must be > 0")])
    return i


def require_non_negative_int(value: Any, *, path: str) -> int:
    i = as_int(value, path=path)
    if i < 0:
        raise ValidationError([ValidationIssue(path, "must be >= 0")])
    return i


def require_positive_number(value: Any, *, path: str) -> float:
    f = as_number(value, path=path)
    if f <= 0:
        raise ValidationError([ValidationIssue(path, "must be > 0")])
    return f


def require_non_negative_number(value: Any, *, path: str) -> float:
    f = as_number(value, path=path)
    if f < 0:
        raise ValidationError([ValidationIssue(path, "must be >= 0")])
    return f


def require_int_range(value: Any, min_val: int, max_val: int, *, path: str) -> int:
    i = as_int(value, path=path)
    if not (min_val <= i <= max_val):
        raise ValidationError([ValidationIssue(path, f"must be between {min_val} and {max_val}")])
    return i


def require_choice(value: Any, choices: Iterable[str], *, path: str) -> str:
    allowed = tuple(choices)
    s = as_str(value, path=path).strip().lower()
    if s not in allowed:
        raise ValidationError([ValidationIssue(path, f"must be one of: {', '.join(allowed)}")])
    return s


def get_optional(mapping: Mapping[str, Any], key: str, default: Any = None) -> Any:
    return mapping.get(key, default)


def get_required(mapping: Mapping[str, Any], key: str, *, path: str) -> Any:
    if key not in mapping:
        raise ValidationError([ValidationIssue(path, f"missing required key '{key}'")])
    return mapping[key]
