# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Phased, dependency-aware execution of generation tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from graphlib import CycleError as GraphCycleError
from graphlib import TopologicalSorter
from types import MappingProxyType
from typing import Any

LOGGER = logging.getLogger(__name__)

TaskFunction = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True, slots=True)
class Task:
    """Unit of work receiving the results of the tasks it depends on."""

    name: str
    run: TaskFunction
    depends_on: tuple[str, ...] = ()


def plan_phases(tasks: Sequence[Task]) -> tuple[tuple[str, ...], ...]:
    """Group ``tasks`` into phases by repeatedly taking every ready task.

    Args:
        tasks: Tasks whose ``depends_on`` names refer to other tasks.

    Returns:
        tuple[tuple[str, ...], ...]: Phases in execution order; names within a
        phase are sorted.

    Raises:
        ValueError: If a dependency is unknown, a name repeats, or the task
            graph is cyclic.
    """

    names = [task.name for task in tasks]
    if len(set(names)) != len(names):
        raise ValueError("task names must be unique")
    known = set(names)
    sorter: TopologicalSorter[str] = TopologicalSorter()
    for task in tasks:
        missing = sorted(set(task.depends_on) - known)
        if missing:
            raise ValueError(f"task '{task.name}' depends on unknown task(s): {', '.join(missing)}")
        sorter.add(task.name, *task.depends_on)
    try:
        sorter.prepare()
    except GraphCycleError as exc:
        raise ValueError(f"task graph is cyclic: {exc.args[1]}") from exc
    phases: list[tuple[str, ...]] = []
    while sorter.is_active():
        ready = tuple(sorted(sorter.get_ready()))
        phases.append(ready)
        sorter.done(*ready)
    return tuple(phases)


class PhasedScheduler:
    """Run tasks phase by phase, each phase concurrently on a thread pool.

    A failing task cancels the not-yet-started tasks of its phase and aborts
    every later phase; the exception propagates unchanged to the caller.
    """

    def __init__(self, tasks: Sequence[Task]) -> None:
        """Plan the execution phases of ``tasks``.

        Args:
            tasks: Tasks to execute.
        """

        self._tasks = {task.name: task for task in tasks}
        self._phases = plan_phases(tasks)

    @property
    def phases(self) -> tuple[tuple[str, ...], ...]:
        return self._phases

    def run(self) -> dict[str, Any]:
        """Execute every phase and return the task results keyed by name.

        Returns:
            dict[str, Any]: Result of each task.
        """

        results: dict[str, Any] = {}
        for index, phase in enumerate(self._phases, start=1):
            LOGGER.debug("phase %d: %s", index, ", ".join(phase))
            results.update(self._run_phase(phase, MappingProxyType(dict(results))))
        return results

    def _run_phase(self, phase: Sequence[str], upstream: Mapping[str, Any]) -> dict[str, Any]:
        outcomes: dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=len(phase), thread_name_prefix="pgext") as executor:
            future_map: dict[Future[Any], str] = {
                executor.submit(self._tasks[name].run, upstream): name for name in phase
            }
            try:
                for future in as_completed(future_map):
                    outcomes[future_map[future]] = future.result()
            except BaseException:
                cancelled = [name for future, name in future_map.items() if future.cancel()]
                if cancelled:
                    LOGGER.debug("cancelled pending task(s): %s", ", ".join(sorted(cancelled)))
                raise
        return outcomes


__all__ = ["PhasedScheduler", "Task", "TaskFunction", "plan_phases"]
