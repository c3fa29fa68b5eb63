"""Wave-based dependency scheduler.

The :class:`DependencyScheduler` consumes a :class:`TaskPlan` and:

1. Picks every pending task whose dependencies have all succeeded.
2. Runs that wave concurrently via :func:`asyncio.gather` and waits for the
   whole wave to finish.
3. Records the results and merges the wave's outputs into the placeholder
   store in one step, in plan order.
4. Stops after the first wave containing a failure, or when no pending task
   can ever become ready (cycle).
5. Hands everything to the aggregator to build a :class:`PlanOutcome`.
"""

from __future__ import annotations

import asyncio

from sayso.core.task.graph import TaskGraph
from sayso.core.task.models import PlanError, PlanOutcome, TaskPlan, TaskResult, TaskSpec
from sayso.core.task.placeholders import PlaceholderStore
from sayso.engine.aggregator import aggregate
from sayso.engine.executor import TaskExecutorAdapter
from sayso.utils.logging import get_logger

logger = get_logger("engine.scheduler")


class DependencyScheduler:
    """Drives a plan to completion or to its first unrecoverable failure.

    Parameters
    ----------
    adapter:
        The :class:`TaskExecutorAdapter` that runs individual tasks.
    concurrency_limit:
        Maximum number of tasks in flight within one wave.  ``None`` or
        ``0`` means every ready task starts at once.
    """

    def __init__(
        self,
        adapter: TaskExecutorAdapter,
        concurrency_limit: int | None = None,
    ) -> None:
        self.adapter = adapter
        self.concurrency_limit = concurrency_limit or None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute_plan(
        self,
        plan: TaskPlan,
        request=None,
        store: PlaceholderStore | None = None,
    ) -> PlanOutcome:
        """Execute every task in *plan* respecting ``depends_on``.

        Parameters
        ----------
        plan:
            A validated task plan.
        request:
            The originating request, forwarded to the adapter for actions
            executed while the plan runs.
        store:
            Placeholder store for this plan.  A fresh one is created when
            omitted.

        Returns
        -------
        PlanOutcome
            Ordered actions on success; the failing task (or the stuck tasks)
            plus partial actions on failure.
        """
        if not plan.tasks:
            logger.info("plan_empty", summary=plan.summary)
            return aggregate(plan, {}, None)

        graph = TaskGraph(plan)
        store = store if store is not None else PlaceholderStore()
        semaphore = (
            asyncio.Semaphore(self.concurrency_limit)
            if self.concurrency_limit
            else None
        )

        pending: list[str] = [t.id for t in plan.tasks]
        results: dict[str, TaskResult] = {}
        succeeded: set[str] = set()
        failure: PlanError | None = None
        wave = 0

        logger.info("plan_start", summary=plan.summary, total_tasks=len(pending))

        while pending:
            ready = [tid for tid in pending if graph.is_ready(tid, succeeded)]
            if not ready:
                failure = self._deadlock(graph, pending, results)
                break

            wave += 1
            logger.info("wave_start", wave=wave, task_ids=ready)

            wave_results: list[TaskResult] = await asyncio.gather(
                *(
                    self._run(graph.get(tid), store, request, semaphore)
                    for tid in ready
                )
            )

            ready_ids = set(ready)
            pending = [tid for tid in pending if tid not in ready_ids]
            for result in wave_results:
                results[result.task_id] = result

            successes = [r for r in wave_results if r.succeeded]
            failures = [r for r in wave_results if not r.succeeded]
            succeeded.update(r.task_id for r in successes)
            store.update_many([r.outputs for r in successes])

            logger.info(
                "wave_complete",
                wave=wave,
                succeeded=len(successes),
                failed=len(failures),
            )

            if failures:
                first = failures[0]
                failure = PlanError(
                    kind="task_failed",
                    task_id=first.task_id,
                    message=f"Task {first.task_id} failed: {first.error}",
                )
                break

        logger.info(
            "plan_complete",
            waves=wave,
            executed=len(results),
            skipped=len(plan.tasks) - len(results),
            success=failure is None,
        )
        return aggregate(plan, results, failure)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(
        self,
        task: TaskSpec,
        store: PlaceholderStore,
        request,
        semaphore: asyncio.Semaphore | None,
    ) -> TaskResult:
        if semaphore is None:
            return await self.adapter.execute_task(task, store, request)
        async with semaphore:
            return await self.adapter.execute_task(task, store, request)

    @staticmethod
    def _deadlock(
        graph: TaskGraph,
        pending: list[str],
        results: dict[str, TaskResult],
    ) -> PlanError:
        """Describe why none of the *pending* tasks can run.

        ``blocked`` when some pending task waits on a task that failed,
        ``cycle`` when they only wait on each other (or on themselves).
        """
        waiting = set(pending)
        blocked = any(
            dependent in waiting
            for tid, result in results.items()
            if not result.succeeded
            for dependent in graph.dependents_of(tid)
        )
        reason = "blocked" if blocked else "cycle"
        logger.error("plan_deadlock", stuck_task_ids=pending, reason=reason)
        return PlanError(
            kind="deadlock",
            message=f"No runnable tasks left ({reason}); stuck: {', '.join(pending)}",
            stuck_task_ids=list(pending),
            reason=reason,
        )
