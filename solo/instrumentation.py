from contextlib import contextmanager
from contextvars import ContextVar

from sqlalchemy import event

# ---------------------------------------------------------------------------
# Per-operation context variable
# ---------------------------------------------------------------------------

query_count_var: ContextVar[int] = ContextVar("query_count", default=0)


def install_query_counter(engine) -> None:
    """
    Register a ``before_cursor_execute`` event listener on *engine* that
    increments ``query_count_var`` for every SQL statement.

    This captures ALL statements including those SQLAlchemy issues itself
    during flush (UPDATE/DELETE of dirty and deleted instances).

    Must be called once per engine (production engine in ``database.py``,
    test engine in ``conftest.py``).
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _count_query(conn, cursor, statement, parameters, context, executemany):
        query_count_var.set(query_count_var.get() + 1)


class QueryCounter:
    """Snapshot of ``query_count_var`` taken when a block is entered."""

    def __init__(self) -> None:
        self._start = query_count_var.get()

    @property
    def count(self) -> int:
        return query_count_var.get() - self._start


@contextmanager
def count_queries():
    """
    Yield a :class:`QueryCounter` reporting how many statements ran inside
    the ``with`` block::

        with count_queries() as counter:
            await session.execute(...)
        logger.debug("%d queries", counter.count)
    """
    yield QueryCounter()
