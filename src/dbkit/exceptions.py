"""
Database toolkit exception classes.
"""


class DatabaseError(Exception):
    """Base class for all dbkit errors.
    """


class ConfigurationError(DatabaseError, ValueError):
    """Error in how a statement, registry or pool was set up.
    """


class MissingParameterError(ConfigurationError):
    """A named parameter in the SQL has no bound value.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f'Missing parameter: {name}')
        self.name = name


class StatementCountError(ConfigurationError):
    """SQL text holds a different number of statements than the strategy runs.
    """

    def __init__(self, count: int, expected: str = 'exactly 1') -> None:
        super().__init__(f'Expected {expected} statement(s), got {count}')
        self.count = count
        self.expected = expected


class TypeMappingError(DatabaseError):
    """No type handler is registered for a type.
    """

    def __init__(self, python_type: type, field: str | None = None) -> None:
        name = getattr(python_type, '__name__', repr(python_type))
        msg = f'Data type {name} does not have a valid mapping function'
        if field is not None:
            msg += f' (field {field!r})'
        super().__init__(msg)
        self.python_type = python_type
        self.field = field


class TypeConversionError(DatabaseError):
    """Error converting a row value into a record field.
    """

    def __init__(self, field: str, python_type: type | None, reason: str = '') -> None:
        name = getattr(python_type, '__name__', repr(python_type))
        msg = f'Failed to map record component: type({name}) referenceName({field})'
        if reason:
            msg += f': {reason}'
        super().__init__(msg)
        self.field = field
        self.python_type = python_type


class ConnectionFailure(DatabaseError):
    """Error establishing a database connection.
    """


class PoolTimeoutError(DatabaseError):
    """No pooled connection became available in time.
    """
