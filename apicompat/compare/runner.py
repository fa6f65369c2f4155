# Copyright Red Hat
#
# apicompat/compare/runner.py - API compatibility work item runner
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Work item queue and runner for API compatibility comparisons.
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
import logging

from apicompat import APICOMPAT_SUBSYSTEM_RUNNER, DIAG_UNRESOLVED_REFERENCE

from .difftypes import DifferenceType, Side
from .engine import ApiComparer, CompatDifference, CompatResults
from .options import CompatOptions
from .provider import SymbolProvider
from .suppression import SuppressionEngine
from .symbols import MetadataInformation, SymbolForest

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_runner(msg, *args, **kwargs):
    """A wrapper for runner subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": APICOMPAT_SUBSYSTEM_RUNNER}, **kwargs)


@dataclass(frozen=True)
class WorkItem:
    """
    One comparison of a set of left assemblies against a set of right
    assemblies.
    """

    #: The left (baseline) assemblies
    left: Tuple[MetadataInformation, ...]
    #: The right (candidate) assemblies
    right: Tuple[MetadataInformation, ...]
    #: Options applying to this comparison
    options: CompatOptions = field(default_factory=CompatOptions)

    def __post_init__(self):
        object.__setattr__(self, "left", tuple(self.left))
        object.__setattr__(self, "right", tuple(self.right))

    def __str__(self):
        left = ", ".join(str(info) for info in self.left)
        right = ", ".join(str(info) for info in self.right)
        return f"[{left}] -> [{right}]"


def unresolved_differences(forest: SymbolForest) -> List[CompatDifference]:
    """
    Return one unresolved reference diagnostic for each item in
    ``forest.unresolved``.

    :param forest: A loaded forest.
    :type forest: ``SymbolForest``
    :rtype: ``List[CompatDifference]``
    """
    differences = []
    for stable_id, metadata in forest.unresolved:
        left = metadata if forest.side == Side.LEFT else None
        right = metadata if forest.side == Side.RIGHT else None
        differences.append(
            CompatDifference(
                DIAG_UNRESOLVED_REFERENCE,
                DifferenceType.CHANGED,
                stable_id,
                left=left,
                right=right,
                message=f"Could not resolve '{stable_id}' in [{metadata}]",
            )
        )
    return differences


class ApiCompatRunner:
    """
    Queue of work items executed against a shared comparer and
    suppression engine.
    """

    def __init__(
        self,
        provider: SymbolProvider,
        comparer: ApiComparer,
        suppression_engine: SuppressionEngine,
        jobs: int = 1,
    ):
        """
        Initialise a new ``ApiCompatRunner``.

        :param provider: The provider used to load each work item's surfaces.
        :type provider: ``SymbolProvider``
        :param comparer: The structural comparer.
        :type comparer: ``ApiComparer``
        :param suppression_engine: The engine filtering differences.
        :type suppression_engine: ``SuppressionEngine``
        :param jobs: The number of work items to run concurrently.
        :type jobs: ``int``
        """
        if jobs < 1:
            raise ValueError(f"Invalid number of jobs: {jobs}")
        self.provider = provider
        self.comparer = comparer
        self.suppression_engine = suppression_engine
        self.jobs = jobs
        self._work_items: List[WorkItem] = []

    @property
    def work_items(self) -> Sequence[WorkItem]:
        """The currently queued work items."""
        return tuple(self._work_items)

    def enqueue_work_item(self, work_item: WorkItem):
        """
        Add ``work_item`` to the queue.

        :param work_item: The work item to add.
        :type work_item: ``WorkItem``
        """
        _log_debug_runner("Enqueued work item %s", work_item)
        self._work_items.append(work_item)

    def _execute(self, work_item: WorkItem) -> List[CompatDifference]:
        _log_debug_runner("Executing work item %s", work_item)
        left = self.provider.load(work_item.left, Side.LEFT)
        right = self.provider.load(work_item.right, Side.RIGHT)

        differences = unresolved_differences(left)
        differences.extend(unresolved_differences(right))
        differences.extend(self.comparer.compare(left, right, work_item.options))

        reported = [
            difference
            for difference in differences
            if not self.suppression_engine.is_suppressed(difference)
        ]
        _log_debug_runner(
            "Work item %s: %d differences, %d reported",
            work_item,
            len(differences),
            len(reported),
        )
        return reported

    def execute_work_items(self, timestamp: Optional[int] = None) -> CompatResults:
        """
        Execute every queued work item and drain the queue.

        Results are concatenated in the order the work items were
        enqueued regardless of the order in which they complete.

        :param timestamp: Optional timestamp for the results.
        :type timestamp: ``Optional[int]``
        :returns: The unsuppressed differences of all work items.
        :rtype: ``CompatResults``
        """
        work_items, self._work_items = self._work_items, []
        start_time = datetime.now()

        if self.jobs > 1 and len(work_items) > 1:
            with ThreadPoolExecutor(max_workers=self.jobs) as executor:
                futures = [executor.submit(self._execute, item) for item in work_items]
                item_results = [future.result() for future in futures]
        else:
            item_results = [self._execute(item) for item in work_items]

        differences = [
            difference for result in item_results for difference in result
        ]
        _log_info(
            "Executed %d work items in %s: %d differences",
            len(work_items),
            datetime.now() - start_time,
            len(differences),
        )
        return CompatResults(differences, timestamp=timestamp)


__all__ = [
    "ApiCompatRunner",
    "WorkItem",
    "unresolved_differences",
]
