"""Rule-string validation for form input.

Usage::

    from migus.validation import Validator, flatten_errors

    validator = Validator.make(
        {"name": name, "email": email, "password": password},
        {"name": "required|min:2|max:50", "email": "required|email", "password": "required|min:4"},
    ).with_messages({"email.email": "El formato del correo electrónico no es válido."})

    if validator.fails():
        return Template("auth/register", errors=flatten_errors(validator.errors()))

Messages are looked up as ``"<field>.<rule>"``, then ``"<rule>"``, then
the built-in default; ``:field``, ``:min``, ``:max`` and ``:other`` are
substituted.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from migus.validation.result import ValidationResult, flatten_errors
from migus.validation.rules import DEFAULT_MESSAGES, FALLBACK_MESSAGE, RULES, parse_rule

__all__ = ["ValidationResult", "Validator", "flatten_errors", "validate"]


class Validator:
    """Validates a data mapping against per-field rule strings.

    Validation runs once, on the first call that needs the outcome.
    Unknown rule names are ignored.
    """

    __slots__ = ("_data", "_errors", "_messages", "_rules")

    def __init__(self, data: Mapping[str, Any], rules: Mapping[str, str | Sequence[str]]) -> None:
        self._data = dict(data)
        self._rules = dict(rules)
        self._messages: dict[str, str] = {}
        self._errors: dict[str, list[str]] | None = None

    @classmethod
    def make(cls, data: Mapping[str, Any], rules: Mapping[str, str | Sequence[str]]) -> Validator:
        return cls(data, rules)

    def with_messages(self, messages: Mapping[str, str]) -> Validator:
        self._messages = dict(messages)
        return self

    def passes(self) -> bool:
        return not self.errors()

    def fails(self) -> bool:
        return not self.passes()

    def errors(self) -> dict[str, list[str]]:
        if self._errors is None:
            self._errors = self._run()
        return self._errors

    def errors_for(self, field: str) -> list[str]:
        return list(self.errors().get(field, []))

    def first(self, field: str) -> str | None:
        messages = self.errors_for(field)
        return messages[0] if messages else None

    def validated(self) -> dict[str, Any]:
        """Fields that have rules and are present in the data."""
        self.errors()
        return {f: self._data[f] for f in self._rules if f in self._data}

    def result(self) -> ValidationResult:
        return ValidationResult(self.validated(), self.errors())

    def _run(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        for field, spec in self._rules.items():
            value = self._data.get(field)
            for rule in _split(spec):
                name, param = parse_rule(rule)
                check = RULES.get(name)
                if check is None:
                    continue
                replacements = check(field, value, self._data, param)
                if replacements is not None:
                    errors.setdefault(field, []).append(self._message(field, name, replacements))
        return errors

    def _message(self, field: str, rule: str, replacements: Mapping[str, str]) -> str:
        template = (
            self._messages.get(f"{field}.{rule}")
            or self._messages.get(rule)
            or DEFAULT_MESSAGES.get(rule, FALLBACK_MESSAGE)
        )
        for placeholder, value in {":field": field, **replacements}.items():
            template = template.replace(placeholder, value)
        return template


def _split(spec: str | Sequence[str]) -> list[str]:
    if isinstance(spec, str):
        return [part for part in spec.split("|") if part.strip()]
    return [part for part in spec if part.strip()]


def validate(data: Mapping[str, Any], rules: Mapping[str, str | Sequence[str]]) -> ValidationResult:
    """One-shot form of ``Validator.make(data, rules).result()``."""
    return Validator.make(data, rules).result()
