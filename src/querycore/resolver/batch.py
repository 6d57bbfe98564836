"""Batch collector.

Accumulates deferred fetch descriptors produced while resolving a response
and executes them as grouped backend calls: all descriptors sharing a
`group_key` become one `RecordFetcher` call over their distinct parent ids
(chunked by `BATCH_MAX_PARENT_IDS`). Results are demultiplexed back to each
descriptor's future by parent id.

Typical usage:

    collector = BatchCollector(fetcher)
    futures = [collector.load(d) for d in descriptors]
    collector.dispatch()
    values = [f.result() for f in futures]

A failed backend call fails every future of its group with `FetchError`;
other groups are unaffected.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from querycore.abc import RecordFetcher
from querycore.exceptions import FetchError
from querycore.logger import Logger
from querycore.settings import QueryCoreSettings
from querycore.settings import settings as api_settings
from querycore.utils import chunk_iter

from .deferred import (
    CountFetch,
    DeferredFetch,
    GroupKey,
    Resolution,
    ResolvedValue,
    ScalarListFetch,
    ToManyFetch,
    ToOneFetch,
)

__all__ = ("BatchCollector",)


class _Group:
    """Descriptors of one group, with futures keyed by parent id."""

    def __init__(self, sample: DeferredFetch) -> None:
        self.sample = sample
        self.futures: Dict[Optional[str], List[Future]] = {}

    def add(self, descriptor: DeferredFetch, future: Future) -> None:
        self.futures.setdefault(descriptor.parent_id, []).append(future)

    @property
    def parent_ids(self) -> List[str]:
        return [pid for pid in self.futures if pid is not None]

    def settle(self, outcomes: Dict[Optional[str], Any]) -> None:
        """Complete each future with its parent's outcome; `FetchError` outcomes fail it."""
        for parent_id, futures in self.futures.items():
            outcome = outcomes.get(parent_id)
            for future in futures:
                if isinstance(outcome, FetchError):
                    future.set_exception(outcome)
                else:
                    future.set_result(outcome)

    def fail(self, error: BaseException) -> None:
        """Fail every future of the group that has not completed yet."""
        for futures in self.futures.values():
            for future in futures:
                if not future.done():
                    future.set_exception(error)


class BatchCollector:
    """Coalesce deferred fetches into one backend call per group.

    `load` may be called from several threads while a response is being
    resolved; `dispatch` flushes everything loaded so far.

    Attributes:
        fetcher: Backend executing the grouped calls
        max_parent_ids: Parent ids per backend call, <= 0 for unlimited
    """

    def __init__(self, fetcher: RecordFetcher, config: Optional[QueryCoreSettings] = None) -> None:
        config = config or api_settings
        self.fetcher = fetcher
        self.max_parent_ids = config.BATCH_MAX_PARENT_IDS
        self.logger = Logger(self.__class__.__name__)
        self._lock = threading.Lock()
        self._groups: Dict[GroupKey, _Group] = {}

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------
    def load(self, resolution: Resolution) -> Future:
        """Register a descriptor and return the future of its result.

        A `ResolvedValue` yields an already completed future.
        """
        future: Future = Future()
        if isinstance(resolution, ResolvedValue):
            future.set_result(resolution.value)
            return future
        key = resolution.group_key
        with self._lock:
            group = self._groups.get(key)
            if group is None:
                group = self._groups[key] = _Group(resolution)
            group.add(resolution, future)
        return future

    def load_many(self, resolutions: Iterable[Resolution]) -> List[Future]:
        return [self.load(r) for r in resolutions]

    @property
    def pending_groups(self) -> int:
        with self._lock:
            return len(self._groups)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def dispatch(self) -> int:
        """Execute all pending groups.

        Returns:
            Number of groups executed
        """
        with self._lock:
            groups = list(self._groups.items())
            self._groups = {}

        for key, group in groups:
            try:
                self._execute(group)
            except Exception as e:
                self.logger.error("Batched fetch failed for group %s: %s", key, e)
                group.fail(FetchError("Batched fetch failed", group_key=key, reason=str(e)))
            else:
                self.logger.message("Dispatched group %s for %d parents", key, len(group.futures))
        return len(groups)

    def resolve(self, resolution: Resolution) -> Any:
        """Load, dispatch and return a single result (mostly for tests and scripts)."""
        future = self.load(resolution)
        self.dispatch()
        return future.result()

    def _execute(self, group: _Group) -> None:
        sample = group.sample
        if isinstance(sample, CountFetch):
            total = self.fetcher.count(sample.model, sample.query_arguments)
            group.settle({pid: total for pid in group.futures})
            return

        results: Dict[str, Any] = {}
        for chunk in self._chunks(group.parent_ids):
            if isinstance(sample, ScalarListFetch):
                results.update(self.fetcher.fetch_scalar_lists(sample.model, sample.field, chunk))
            else:
                results.update(
                    self.fetcher.fetch_related(sample.parent_model, sample.field, chunk, sample.query_arguments)
                )

        # Every outcome is computed before any future completes
        outcomes = {pid: self._demultiplex(sample, pid, results.get(pid)) for pid in group.futures}
        group.settle(outcomes)

    def _demultiplex(
        self, sample: DeferredFetch, parent_id: Optional[str], value: Optional[List[Any]]
    ) -> Union[Any, FetchError]:
        items = list(value or [])
        if isinstance(sample, ToOneFetch):
            if len(items) > 1:
                return FetchError(
                    "Expected at most one related record",
                    group_key=sample.group_key,
                    parent_id=parent_id,
                    found=len(items),
                )
            return items[0] if items else None
        if isinstance(sample, (ToManyFetch, ScalarListFetch)):
            return items
        return value

    def _chunks(self, parent_ids: Sequence[str]) -> Iterable[Sequence[str]]:
        if not parent_ids:
            return []
        return chunk_iter(list(parent_ids), self.max_parent_ids)
