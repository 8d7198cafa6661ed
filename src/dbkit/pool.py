"""
Bounded, resizable pool of DB-API connections.

Idle connections wait in a FIFO `queue.Queue`. Acquire and release only touch
the queue; `resize` holds the pool lock for its whole duration so that
concurrent resizes serialize. Once every acquired connection is released the
number of idle connections equals the capacity.

Shutdown note: `disconnect_all` only closes idle connections. A thread blocked
in `acquire()` without a timeout stays blocked until something releases a
connection into the pool.
"""
import logging
import queue
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from dbkit.exceptions import ConfigurationError, ConnectionFailure
from dbkit.exceptions import PoolTimeoutError
from dbkit.utils import close_quietly

logger = logging.getLogger(__name__)

__all__ = ['ConnectionPool']


class ConnectionPool:
    """Fixed-capacity connection pool with blocking acquire.

    Args:
        connection_factory: Callable returning a new, configured connection
        size: Number of connections, created eagerly (must be >= 1)

    Raises
        ConfigurationError: size < 1
        ConnectionFailure: the factory failed; connections built so far are closed
    """

    def __init__(self, connection_factory: Callable[[], Any], size: int = 3) -> None:
        if size < 1:
            raise ConfigurationError(f'Pool size must be >= 1, got {size}')
        self.connection_factory = connection_factory
        self._idle: queue.Queue = queue.Queue()
        self._lock = threading.RLock()
        self._capacity = 0
        for _ in range(size):
            self._idle.put(self._create_connection())
            self._capacity += 1
        logger.debug(f'Created connection pool with {size} connection(s)')

    def __repr__(self) -> str:
        return f'ConnectionPool(capacity={self._capacity}, idle={self.size()})'

    @property
    def capacity(self) -> int:
        """Total number of connections the pool owns, idle or acquired."""
        return self._capacity

    def size(self) -> int:
        """Number of idle connections."""
        return self._idle.qsize()

    def _create_connection(self) -> Any:
        try:
            return self.connection_factory()
        except Exception as e:
            logger.error(f'Failed to create pooled connection: {e}')
            self.disconnect_all()
            raise ConnectionFailure(f'Failed to create pooled connection: {e}') from e

    def acquire(self, timeout: float | None = None) -> Any:
        """Take an idle connection, blocking until one is available.

        Args:
            timeout: Seconds to wait; None waits indefinitely

        Raises
            PoolTimeoutError: no connection became idle within `timeout`
        """
        try:
            cn = self._idle.get(timeout=timeout)
        except queue.Empty:
            raise PoolTimeoutError(f'No connection available after {timeout}s') from None
        logger.debug(f'Acquired connection {id(cn)} ({self.size()} idle)')
        return cn

    def release(self, cn: Any) -> None:
        """Return a connection to the pool. The connection is not validated."""
        self._idle.put(cn)
        logger.debug(f'Released connection {id(cn)} ({self.size()} idle)')

    @contextmanager
    def connection(self, timeout: float | None = None) -> Iterator[Any]:
        """Acquire a connection for the duration of a with block."""
        cn = self.acquire(timeout)
        try:
            yield cn
        finally:
            self.release(cn)

    def resize(self, size: int) -> None:
        """Change the pool capacity.

        Shrinking closes `capacity - size` connections and blocks until enough
        of them have been released. Growing creates the missing connections.

        Raises
            ConfigurationError: size < 1; the pool is left unchanged
        """
        if size < 1:
            raise ConfigurationError(f'Pool size must be >= 1, got {size}')
        with self._lock:
            current = self._capacity
            if size < current:
                for _ in range(current - size):
                    close_quietly(self._idle.get(), 'pooled connection')
                    self._capacity -= 1
            elif size > current:
                for _ in range(size - current):
                    self._idle.put(self._create_connection())
                    self._capacity += 1
            logger.debug(f'Resized connection pool from {current} to {self._capacity}')

    def disconnect_all(self) -> None:
        """Close every idle connection.

        Close errors are logged per connection. Acquired connections are not
        touched; they are closed by whoever still holds them.
        """
        with self._lock:
            closed = 0
            while True:
                try:
                    cn = self._idle.get_nowait()
                except queue.Empty:
                    break
                close_quietly(cn, 'pooled connection')
                self._capacity -= 1
                closed += 1
            logger.debug(f'Disconnected {closed} pooled connection(s)')
