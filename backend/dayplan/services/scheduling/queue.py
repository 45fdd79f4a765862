"""Builds the ordered list of habits and tasks to place for a day."""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from dayplan.api.schemas.plan import Habit, Task
from dayplan.services.scheduling.clock import to_minutes

logger = logging.getLogger(__name__)

PRIORITY_WEIGHT = 50
URGENCY_OVERDUE = 150
URGENCY_DUE_TODAY = 100
URGENCY_DUE_SOON = 50
WINDOW_BONUS = {"morning": 30, "explicit": 50}
FLEXIBILITY_BONUS = {"fixed": 40, "semi-flex": 20}


@dataclass
class QueueItem:
    kind: str
    source_id: str
    title: str
    duration: int
    minimum_duration: int
    priority: int
    energy_level: str
    category: str
    preferred_window: Optional[str] = None
    explicit_start: Optional[int] = None
    flexibility: str = "flexible"
    due_date: Optional[dt.date] = None
    dependencies: List[str] = field(default_factory=list)
    score: float = 0.0

    @classmethod
    def from_habit(cls, habit: Habit) -> "QueueItem":
        window = habit.preferred_time_window
        explicit = to_minutes(habit.explicit_start_time) if habit.explicit_start_time else None
        if window == "explicit" and explicit is None:
            window = None
        return cls(
            kind="habit",
            source_id=habit.id,
            title=habit.name,
            duration=habit.duration,
            minimum_duration=min(habit.minimum_viable_duration or habit.duration, habit.duration),
            priority=habit.priority,
            energy_level=habit.energy_level,
            category=habit.category,
            preferred_window=window,
            explicit_start=explicit,
            flexibility=habit.flexibility,
        )

    @classmethod
    def from_task(cls, task: Task, dependencies: List[str]) -> "QueueItem":
        return cls(
            kind="task",
            source_id=task.id,
            title=task.title,
            duration=task.estimated_duration,
            minimum_duration=task.estimated_duration,
            priority=task.priority,
            energy_level=task.energy_level,
            category=task.category,
            preferred_window=task.time_window_preference,
            due_date=task.due_date,
            dependencies=dependencies,
        )


def stable_hash(value: str) -> int:
    """31-based polynomial hash over code points, kept to unsigned 32 bits."""
    result = 0
    for char in value:
        result = (result * 31 + ord(char)) & 0xFFFFFFFF
    return result


def weekday_index(day: dt.date) -> int:
    """Weekday number with 0 = Sunday."""
    return (day.weekday() + 1) % 7


def habit_due_on(habit: Habit, day: dt.date) -> bool:
    weekday = weekday_index(day)
    if habit.frequency == "daily":
        return True
    if habit.frequency == "specific-days":
        return weekday in habit.specific_days
    if habit.frequency == "weekly":
        return stable_hash(habit.id) % 7 == weekday
    if habit.frequency == "x-times-per-week":
        times = min(max(habit.times_per_week or 1, 1), 7)
        step = 7 // times
        seed = stable_hash(habit.id)
        return weekday in {(seed + i * step) % 7 for i in range(times)}
    return False


def days_until_due(due_date: Optional[dt.date], plan_date: dt.date) -> Optional[int]:
    if due_date is None:
        return None
    return (due_date - plan_date).days


def composite_score(item: QueueItem, plan_date: dt.date) -> float:
    score = float(item.priority * PRIORITY_WEIGHT)
    days = days_until_due(item.due_date, plan_date)
    if days is not None:
        if days < 0:
            score += URGENCY_OVERDUE
        elif days == 0:
            score += URGENCY_DUE_TODAY
        elif days <= 2:
            score += URGENCY_DUE_SOON
    if item.preferred_window:
        score += WINDOW_BONUS.get(item.preferred_window, 0)
    score += FLEXIBILITY_BONUS.get(item.flexibility, 0)
    return score


def topological_order(tasks: Sequence[Task]) -> List[Task]:
    """
    Order tasks so none precedes a pending dependency.

    Input order breaks ties. Tasks stuck in a cycle are appended at the end in
    input order; the placer then reports their dependencies as unmet.
    """
    pending_ids = {task.id for task in tasks}
    ordered: List[Task] = []
    placed: Set[str] = set()
    remaining = list(tasks)

    progress = True
    while remaining and progress:
        progress = False
        still_waiting: List[Task] = []
        for task in remaining:
            blockers = [dep for dep in task.dependencies if dep in pending_ids and dep not in placed]
            if blockers:
                still_waiting.append(task)
                continue
            ordered.append(task)
            placed.add(task.id)
            progress = True
        remaining = still_waiting

    if remaining:
        logger.debug("Dependency cycle among tasks: %s", [task.id for task in remaining])
    return ordered + remaining


def build_queue(habits: Sequence[Habit], tasks: Sequence[Task], plan_date: dt.date) -> List[QueueItem]:
    completed_ids = {task.id for task in tasks if task.is_completed}
    open_tasks = [task for task in tasks if task.is_active and not task.is_completed]

    free: List[QueueItem] = []
    for habit in habits:
        if habit.is_active and habit_due_on(habit, plan_date):
            free.append(QueueItem.from_habit(habit))

    dependent: List[QueueItem] = []
    for task in topological_order(open_tasks):
        open_dependencies = [dep for dep in task.dependencies if dep not in completed_ids]
        item = QueueItem.from_task(task, open_dependencies)
        (dependent if open_dependencies else free).append(item)

    for item in free + dependent:
        item.score = composite_score(item, plan_date)

    free.sort(key=lambda item: -item.score)
    queue = free + dependent
    logger.debug(
        "Queue for %s: %s",
        plan_date.isoformat(),
        [(item.kind, item.source_id, item.score) for item in queue],
    )
    return queue
