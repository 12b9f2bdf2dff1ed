# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the phased task scheduler."""

from __future__ import annotations

import threading

import pytest

from pgext_manifest.pipeline import PhasedScheduler, Task, plan_phases


def _constant(value):
    return lambda _results: value


def test_plan_phases_groups_ready_tasks() -> None:
    tasks = [
        Task("order", _constant(1)),
        Task("docs", _constant(2)),
        Task("sql", _constant(3), depends_on=("order",)),
        Task("check", _constant(4), depends_on=("order",)),
    ]
    assert plan_phases(tasks) == (("docs", "order"), ("check", "sql"))


def test_plan_phases_rejects_unknown_and_cyclic_dependencies() -> None:
    with pytest.raises(ValueError, match="unknown task"):
        plan_phases([Task("a", _constant(1), depends_on=("ghost",))])
    with pytest.raises(ValueError, match="cyclic"):
        plan_phases([Task("a", _constant(1), depends_on=("b",)), Task("b", _constant(2), depends_on=("a",))])
    with pytest.raises(ValueError, match="unique"):
        plan_phases([Task("a", _constant(1)), Task("a", _constant(2))])


def test_downstream_tasks_receive_upstream_results() -> None:
    scheduler = PhasedScheduler(
        [
            Task("base", _constant(20)),
            Task("double", lambda results: results["base"] * 2, depends_on=("base",)),
            Task("sum", lambda results: results["base"] + results["double"], depends_on=("base", "double")),
        ],
    )
    assert scheduler.phases == (("base",), ("double",), ("sum",))
    assert scheduler.run() == {"base": 20, "double": 40, "sum": 60}


def test_tasks_within_a_phase_run_concurrently() -> None:
    barrier = threading.Barrier(3, timeout=5)

    def wait(_results):
        barrier.wait()
        return threading.current_thread().name

    results = PhasedScheduler([Task(f"t{index}", wait) for index in range(3)]).run()
    assert len(set(results.values())) == 3


def test_failure_aborts_later_phases() -> None:
    ran: list[str] = []

    def boom(_results):
        raise RuntimeError("render failed")

    def later(_results):
        ran.append("later")
        return None

    scheduler = PhasedScheduler([Task("boom", boom), Task("later", later, depends_on=("boom",))])
    with pytest.raises(RuntimeError, match="render failed"):
        scheduler.run()
    assert ran == []


def test_upstream_results_are_read_only() -> None:
    def mutate(results):
        results["base"] = 0  # type: ignore[index]

    scheduler = PhasedScheduler([Task("base", _constant(1)), Task("mutate", mutate, depends_on=("base",))])
    with pytest.raises(TypeError):
        scheduler.run()
