"""
Named-parameter SQL processing.

SQL templates use ``:name`` tokens for parameters. This module turns them into
positional placeholder SQL for the DB-API drivers:

    SQL text → split on ``;`` → replace ``:name`` → (positional SQL, names)

Substitution is purely textual: a colon followed by word characters is always
a parameter, there is no escaping and no awareness of string literals.

Main entry points:
- `compile_named(sql, placeholder)` - Positional SQL plus parameter order
- `split_statements(sql)` - Statement segments of a template
- `bind_values(names, params)` - Values in parameter order
- `substitute_literals(sql, params)` - Unsafe textual substitution (scripts)
"""
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from numbers import Number, Real
from typing import Any

from dbkit.exceptions import ConfigurationError, MissingParameterError

__all__ = [
    'NAMED_PARAM',
    'CompiledSql',
    'parameter_names',
    'compile_named',
    'split_statements',
    'bind_values',
    'to_literal',
    'substitute_literals',
    'sanitize',
]

NAMED_PARAM = re.compile(r':(\w+)')

_NOT_ALNUM = re.compile(r'[^a-zA-Z0-9]')


@dataclass(frozen=True, slots=True)
class CompiledSql:
    """Positional SQL and the parameter names in placeholder order."""
    sql: str
    names: tuple[str, ...]

    @property
    def placeholder_count(self) -> int:
        return len(self.names)


def parameter_names(sql: str) -> list[str]:
    """Return parameter identifiers in the order they appear.

    Repeated identifiers are kept once per occurrence.
    """
    return NAMED_PARAM.findall(sql)


def compile_named(sql: str, placeholder: str = '?') -> CompiledSql:
    """Replace every ``:name`` token with a positional placeholder.

    Parameters
        sql: SQL text with named parameters
        placeholder: Driver placeholder marker, ``?`` (qmark) or ``%s`` (format)

    Returns
        CompiledSql with the rewritten text and the names in source order
    """
    if placeholder == '%s':
        sql = sql.replace('%', '%%')

    names: list[str] = []

    def _replace(match: re.Match) -> str:
        names.append(match.group(1))
        return placeholder

    return CompiledSql(NAMED_PARAM.sub(_replace, sql), tuple(names))


def split_statements(sql: str) -> list[str]:
    """Split SQL text into its ``;`` separated statements.

    Each segment is stripped of surrounding whitespace and newlines, empty
    segments are dropped.
    """
    return [segment.strip() for segment in sql.split(';') if segment.strip()]


def bind_values(names: Sequence[str], params: Mapping[str, Any]) -> tuple:
    """Collect parameter values in placeholder order.

    Raises MissingParameterError naming the first identifier without a value.
    """
    values = []
    for name in names:
        if name not in params:
            raise MissingParameterError(name)
        values.append(params[name])
    return tuple(values)


def to_literal(value: Any, blob_literal: Callable[[bytes], str] | None = None) -> str:
    """Render a value as an SQL literal for textual substitution.

    Finite real numbers are inserted verbatim, binary values go through the
    dialect's `blob_literal`, everything else is single quoted with embedded
    quotes doubled. This is NOT protection against SQL injection.

    Raises
        ConfigurationError: the value has no literal form (binary without a
            blob renderer, NaN or infinity, complex numbers)
    """
    if value is None:
        return 'NULL'
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, bytes | bytearray | memoryview):
        if blob_literal is None:
            raise ConfigurationError('Binary values need a dialect blob literal')
        return blob_literal(bytes(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ConfigurationError(f'{value!r} has no SQL literal form')
        return str(value)
    if isinstance(value, Real):
        if not math.isfinite(value):
            raise ConfigurationError(f'{value!r} has no SQL literal form')
        return str(value)
    if isinstance(value, Number):
        raise ConfigurationError(f'{type(value).__name__} value {value!r} has no SQL literal form')
    text = str(value).replace("'", "''")
    return f"'{text}'"


def substitute_literals(sql: str, params: Mapping[str, Any],
                        blob_literal: Callable[[bytes], str] | None = None) -> str:
    """Replace every ``:name`` token with the literal form of its value.

    Used by scripts, where engines may reject placeholder binding across
    several heterogeneous statements.
    """
    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in params:
            raise MissingParameterError(name)
        return to_literal(params[name], blob_literal)

    return NAMED_PARAM.sub(_replace, sql)


def sanitize(text: str) -> str:
    """Strip everything but ASCII letters and digits.

    Only meant for identifiers such as database names, not for values.
    """
    return _NOT_ALNUM.sub('', text)
