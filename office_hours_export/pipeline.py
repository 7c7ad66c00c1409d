"""
Run every office-hours strategy for a course and merge what they find.

All strategies are attempted, even after one has found records, so instructors
listed in different places are all picked up. A failing strategy never stops
the others: its error is classified and recorded on its StrategyOutcome.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Dict, Iterable, List, Optional, Sequence

from .errors import classify_failure
from .models import FailureKind, InstructorRecord, PipelineResult, StrategyOutcome
from .provider import ContentProvider
from .strategies import Strategy, default_strategies

logger = logging.getLogger(__name__)


def dedupe_records(records: Iterable[InstructorRecord]) -> List[InstructorRecord]:
    """
    Merge records with exactly the same instructor_label, keeping the first
    one seen (earlier strategies win). Order of first appearance is kept.
    """
    seen: set[str] = set()
    unique: List[InstructorRecord] = []
    for record in records:
        if record.instructor_label in seen:
            continue
        seen.add(record.instructor_label)
        unique.append(record)
    return unique


def _run_strategy(strategy: Strategy, course_id: str, provider: ContentProvider) -> StrategyOutcome:
    try:
        records = strategy.run(course_id, provider)
    except Exception as e:
        failure = classify_failure(e)
        if failure is FailureKind.OTHER_ERROR:
            logger.warning("%s failed for course %s: %s", strategy.kind.value, course_id, e, exc_info=True)
        else:
            logger.info("%s failed for course %s: %s", strategy.kind.value, course_id, failure.value)
        return StrategyOutcome(kind=strategy.kind, failure=failure)
    logger.info("%s: %d record(s) for course %s", strategy.kind.value, len(records), course_id)
    return StrategyOutcome(kind=strategy.kind, records=list(records))


def _timed_out(strategy: Strategy) -> StrategyOutcome:
    logger.warning("%s did not finish before the deadline", strategy.kind.value)
    return StrategyOutcome(kind=strategy.kind, failure=FailureKind.OTHER_ERROR, timed_out=True)


def build_result(outcomes: Sequence[StrategyOutcome]) -> PipelineResult:
    """Concatenate outcomes (in the given order), dedupe, and flag permission-only failures."""
    records = dedupe_records(r for outcome in outcomes for r in outcome.records)
    permission_only = (
        not records
        and bool(outcomes)
        and all(o.failure is FailureKind.PERMISSION_DENIED for o in outcomes)
    )
    return PipelineResult(records=records, permission_only_failure=permission_only, outcomes=list(outcomes))


class OfficeHoursPipeline:
    """
    Office hours lookup for any number of courses.

    Build one and pass it to whatever needs it; it holds only configuration,
    so concurrent get_office_hours() calls for different courses are safe.

    :param strategies: Strategies in priority order (default: all four).
    :param concurrent: Run strategies on a thread pool instead of one by one.
    :param timeout: Overall deadline in seconds, in either mode. Unfinished
        strategies are abandoned and whatever was found by then is returned.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[Strategy]] = None,
        concurrent: bool = False,
        timeout: Optional[float] = None,
        max_workers: int = 4,
    ) -> None:
        self.strategies: List[Strategy] = list(strategies) if strategies is not None else default_strategies()
        self.concurrent = concurrent
        self.timeout = timeout
        self.max_workers = max_workers

    def get_office_hours(self, course_id: str, provider: ContentProvider) -> PipelineResult:
        if self.concurrent:
            outcomes = self._run_pooled(course_id, provider, self.max_workers)
        elif self.timeout is not None:
            # One worker: still one strategy at a time, in order
            outcomes = self._run_pooled(course_id, provider, 1)
        else:
            outcomes = [_run_strategy(s, course_id, provider) for s in self.strategies]
        result = build_result(outcomes)
        logger.info(
            "Course %s: %d instructor record(s)%s",
            course_id,
            len(result.records),
            " (permission denied everywhere)" if result.permission_only_failure else "",
        )
        return result

    def _run_pooled(self, course_id: str, provider: ContentProvider, workers: int) -> List[StrategyOutcome]:
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="office-hours")
        try:
            futures: Dict[Future, Strategy] = {
                executor.submit(_run_strategy, s, course_id, provider): s for s in self.strategies
            }
            done, _ = wait(futures, timeout=self.timeout)
            outcomes: List[StrategyOutcome] = []
            # Priority order, whatever order they finished in
            for future, strategy in futures.items():
                if future in done:
                    outcomes.append(future.result())
                else:
                    outcomes.append(_timed_out(strategy))
            return outcomes
        finally:
            # Don't block on abandoned strategies
            executor.shutdown(wait=False, cancel_futures=True)


def get_office_hours(
    course_id: str,
    provider: ContentProvider,
    concurrent: bool = False,
    timeout: Optional[float] = None,
) -> PipelineResult:
    """Look up office hours for one course with the default strategies."""
    return OfficeHoursPipeline(concurrent=concurrent, timeout=timeout).get_office_hours(course_id, provider)
