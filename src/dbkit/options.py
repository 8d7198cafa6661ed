from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pandas as pd
from dbkit.dialect import get_available_dialects, get_dialect_class
from dbkit.dialect import is_supported_dialect
from dbkit.exceptions import ConfigurationError

from libb import ConfigOptions, scriptname

__all__ = [
    'DatabaseOptions',
    'pandas_numpy_data_loader',
    'iterdict_data_loader',
]


def iterdict_data_loader(data, columns, **kwargs) -> list[dict]:
    """Minimal data loader.

    Accepts additional keyword arguments for compatibility with other data
    loaders, but doesn't use them.
    """
    if not data:
        return []
    return list(data)


def pandas_numpy_data_loader(data, columns, **kwargs) -> pd.DataFrame:
    """Standard pandas DataFrame loader using NumPy.

    Always returns a DataFrame, never None, with columns preserved for empty results.
    """
    if not data:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame.from_records(list(data), columns=list(columns))


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `postgresql`, `sqlite`

    Connection pooling options:
    - pool_size: Number of pooled connections (default: 3)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: None, wait forever)

    Statement options:
    - transaction: Whether statements built by the facade run in a transaction (default: True)
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    data_loader: Callable[..., Any] | None = None
    # Connection pooling parameters
    pool_size: int = 3
    pool_wait_timeout: float | None = None
    transaction: bool = True

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ConfigurationError(f'drivername must be one of: {available}')
        self.appname = self.appname or scriptname() or 'python_console'
        get_dialect_class(self.drivername).validate_options(self)
        if self.pool_size < 1:
            raise ConfigurationError(f'pool_size must be >= 1, got {self.pool_size}')
        if self.data_loader is None:
            self.data_loader = iterdict_data_loader
