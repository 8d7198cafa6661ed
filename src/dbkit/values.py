"""
Value types without a native Python counterpart.

IPv4 and IPv6 addresses use `ipaddress.IPv4Address` / `ipaddress.IPv6Address`.
"""

__all__ = ['Char']


class Char(str):
    """A single character, stored as a one-character string column.
    """

    def __new__(cls, value: str = '') -> 'Char':
        if len(value) != 1:
            raise ValueError(f'Char requires exactly one character, got {value!r}')
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f'Char({str(self)!r})'
