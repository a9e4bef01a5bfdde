"""Declarative payload validation.

A ``Schema`` maps field names to ``Field`` declarations. Each field is run
through a type coercer, a length check and any extra ``Rule`` predicates.
Every violation across the whole payload is collected before failing, and
fields the schema does not declare are dropped silently.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import AnyUrl, EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from scribe.errors import FieldViolation, ValidationError

_MISSING = object()

_url_adapter = TypeAdapter(AnyUrl)
_email_adapter = TypeAdapter(EmailStr)


class RuleFailed(Exception):
    """Raised by a coercer when a value cannot take the declared type."""


@dataclass(frozen=True)
class Rule:
    """A predicate over the coerced value plus the message used when it fails."""

    check: Callable[[Any], bool]
    message: str


def is_identifier(value: Any) -> bool:
    """True when ``value`` has the shape of a record id."""
    if isinstance(value, uuid.UUID):
        return True
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _coerce_string(value: Any) -> str:
    if not isinstance(value, str):
        raise RuleFailed("must be a string")
    return value.strip()


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise RuleFailed("must be a boolean")


def _coerce_identifier(value: Any) -> str:
    if not is_identifier(value):
        raise RuleFailed("must be a valid id")
    return str(uuid.UUID(str(value)))


def _coerce_uri(value: Any) -> str:
    text = _coerce_string(value)
    try:
        _url_adapter.validate_python(text)
    except PydanticValidationError:
        raise RuleFailed("must be a valid uri") from None
    return text


def _coerce_email(value: Any) -> str:
    text = _coerce_string(value)
    try:
        return str(_email_adapter.validate_python(text)).lower()
    except PydanticValidationError:
        raise RuleFailed("must be a valid email") from None


COERCERS: dict[str, Callable[[Any], Any]] = {
    "string": _coerce_string,
    "boolean": _coerce_boolean,
    "identifier": _coerce_identifier,
    "uri": _coerce_uri,
    "email": _coerce_email,
}


@dataclass(frozen=True)
class Field:
    """Declaration for one payload field.

    ``kind`` names a coercer from ``COERCERS``; ``many=True`` declares a list
    whose items each go through that coercer. ``max_length`` applies to
    strings, or to each item of a list. ``allow_empty`` accepts ``""`` and
    ``None`` as explicit values.
    """

    kind: str = "string"
    required: bool = False
    many: bool = False
    max_length: int | None = None
    default: Any = _MISSING
    allow_empty: bool = False
    rules: tuple[Rule, ...] = ()

    def default_value(self) -> Any:
        if callable(self.default):
            return self.default()
        return self.default

    def _coerce_one(self, name: str, value: Any) -> tuple[Any, list[str]]:
        coerced = COERCERS[self.kind](value)
        problems = []
        if (
            self.max_length is not None
            and isinstance(coerced, str)
            and len(coerced) > self.max_length
        ):
            problems.append(
                f'"{name}" length must be less than or equal to '
                f"{self.max_length} characters long"
            )
        return coerced, problems

    def evaluate(self, name: str, value: Any) -> tuple[Any, list[str]]:
        """Coerce ``value`` and return it with every rule message it violates."""
        if self.many:
            if not isinstance(value, list):
                return value, [f'"{name}" must be an array']
            items, problems = [], []
            for index, item in enumerate(value):
                label = f"{name}[{index}]"
                try:
                    coerced, item_problems = self._coerce_one(label, item)
                except RuleFailed as exc:
                    problems.append(f'"{label}" {exc}')
                    continue
                items.append(coerced)
                problems.extend(item_problems)
            value = items
        else:
            try:
                value, problems = self._coerce_one(name, value)
            except RuleFailed as exc:
                return value, [f'"{name}" {exc}']
            if value == "" and not self.allow_empty:
                return value, [f'"{name}" is not allowed to be empty']

        for rule in self.rules:
            if not rule.check(value):
                problems.append(rule.message)
        return value, problems


@dataclass(frozen=True)
class Schema:
    fields: Mapping[str, Field]
    min_fields: int = 0
    name: str = "payload"
    messages: Mapping[str, str] = field(default_factory=dict)

    def validate(self, payload: Any) -> dict[str, Any]:
        """Return the normalized payload or raise ``ValidationError``.

        ``messages`` overrides the "is required" message per field.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError(
                [FieldViolation(self.name, f'"{self.name}" must be an object')]
            )

        normalized: dict[str, Any] = {}
        violations: list[FieldViolation] = []
        supplied = 0

        for name, declared in self.fields.items():
            raw = payload.get(name, _MISSING)

            absent = raw is _MISSING or (
                raw is None and (declared.required or not declared.allow_empty)
            )
            if absent:
                if declared.required:
                    message = self.messages.get(name, f'"{name}" is required')
                    violations.append(FieldViolation(name, message))
                elif declared.default is not _MISSING:
                    normalized[name] = declared.default_value()
                continue

            supplied += 1
            if raw is None:
                normalized[name] = None
                continue

            value, problems = declared.evaluate(name, raw)
            if problems:
                violations.extend(FieldViolation(name, p) for p in problems)
                continue
            normalized[name] = value

        if supplied < self.min_fields:
            violations.append(
                FieldViolation(
                    self.name,
                    f'"{self.name}" must have at least {self.min_fields} '
                    f"known field{'s' if self.min_fields != 1 else ''}",
                )
            )

        if violations:
            raise ValidationError(violations)
        return normalized
