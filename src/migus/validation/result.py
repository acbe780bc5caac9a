"""Validation result: immutable container for validated data or errors."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of a validation run.

    The result is falsy when invalid, so you can write::

        result = Validator.make(form, rules).result()
        if not result:
            return Template("auth/register", errors=flatten_errors(result.errors))

    ``data`` holds the validated fields (those with rules that were
    present in the input). ``errors`` maps field names to messages in
    rule order.
    """

    data: dict[str, object]
    errors: dict[str, list[str]]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid


def flatten_errors(errors: dict[str, list[str]]) -> dict[str, str]:
    """Keep the first message per field, the shape form templates use."""
    return {name: messages[0] for name, messages in errors.items() if messages}
