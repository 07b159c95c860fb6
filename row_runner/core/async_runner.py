"""Asynchronous query execution on a worker pool.

Each call submits the matching QueryRunner call as one unit of work and
returns a ``concurrent.futures.Future``. Failures surface when the future
is consumed. Cancelling a future only prevents a call that has not started.
Use ``asyncio.wrap_future`` to await the futures from asyncio code.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, TypeVar

from row_runner.adapters.protocol import Connection
from row_runner.core.connection import ConnectionConfig
from row_runner.core.runner import QueryRunner
from row_runner.mapping.protocol import ResultHandler

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncQueryRunner:
    """Runs QueryRunner calls on an executor.

    Args:
        runner: The synchronous runner doing the work. Defaults to a
            QueryRunner without a data source (borrowed connections only).
        executor: Worker pool. When omitted a ThreadPoolExecutor is created
            and shut down by :meth:`close`.
        max_workers: Size of the created ThreadPoolExecutor.
    """

    def __init__(
        self,
        runner: QueryRunner | None = None,
        executor: Executor | None = None,
        *,
        max_workers: int | None = None,
    ) -> None:
        self._runner = runner if runner is not None else QueryRunner()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="row_runner",
        )

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        *,
        max_workers: int | None = None,
        pmd_known_broken: bool = False,
    ) -> AsyncQueryRunner:
        """Create an AsyncQueryRunner whose runner owns a pool built from *config*.

        *max_workers* defaults to ``config.pool_size``, one worker per pooled
        connection.
        """
        runner = QueryRunner.from_config(config, pmd_known_broken=pmd_known_broken)
        if max_workers is None:
            max_workers = config.pool_size
        return cls(runner, max_workers=max_workers)

    @property
    def runner(self) -> QueryRunner:
        return self._runner

    def query(
        self,
        sql: str,
        handler: ResultHandler[T],
        *params: Any,
        connection: Connection | None = None,
    ) -> Future[T]:
        """Submit :meth:`QueryRunner.query`."""
        return self._submit(self._runner.query, sql, handler, *params, connection=connection)

    def update(
        self,
        sql: str,
        *params: Any,
        connection: Connection | None = None,
    ) -> Future[int]:
        """Submit :meth:`QueryRunner.update`."""
        return self._submit(self._runner.update, sql, *params, connection=connection)

    def insert(
        self,
        sql: str,
        handler: ResultHandler[T],
        *params: Any,
        connection: Connection | None = None,
    ) -> Future[T]:
        """Submit :meth:`QueryRunner.insert`."""
        return self._submit(self._runner.insert, sql, handler, *params, connection=connection)

    def batch(
        self,
        sql: str,
        params_table: Sequence[Sequence[Any]],
        *,
        connection: Connection | None = None,
    ) -> Future[list[int]]:
        """Submit :meth:`QueryRunner.batch`."""
        return self._submit(self._runner.batch, sql, params_table, connection=connection)

    def close(self, wait: bool = True) -> None:
        """Shut down an owned executor, then close the runner."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        self._runner.close()

    def __enter__(self) -> AsyncQueryRunner:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()

    def _submit(self, func: Any, *args: Any, **kwargs: Any) -> Future[Any]:
        logger.debug("Submitting %s", func.__name__)
        return self._executor.submit(func, *args, **kwargs)
