"""Tests for item placement filters and scoring."""
from __future__ import annotations

from dayplan.api.schemas.plan import DailyInput, Habit, Task
from dayplan.services.scheduling.clock import to_minutes
from dayplan.services.scheduling.placement import (
    NO_SLOT_REASON,
    place_item,
    score_candidate,
    start_window,
    title_window,
)
from dayplan.services.scheduling.queue import QueueItem
from dayplan.services.scheduling.slots import (
    TimeSlot,
    awake_window,
    calculate_available_slots,
    reserve_downtime,
)
from dayplan.services.scheduling.state import PlanningContext


def _context(daily_input: DailyInput) -> PlanningContext:
    wake, sleep_start = awake_window(daily_input)
    slots = calculate_available_slots(daily_input, wake)
    reserve_downtime(slots, daily_input)
    return PlanningContext(
        plan_date=daily_input.date,
        buffer=daily_input.constraints.buffers_between_blocks_min,
        sleep_start=sleep_start,
        slots=slots,
    )


def _open_day() -> DailyInput:
    return DailyInput(date="2024-01-15", sleep={"start": "23:00", "end": "07:00"})


def _task_item(title: str, duration: int = 30, **overrides) -> QueueItem:
    task = Task(id=overrides.pop("id", "t1"), title=title, estimated_duration=duration, **overrides)
    return QueueItem.from_task(task, list(task.dependencies))


def test_title_window_detection() -> None:
    assert title_window("Night walk") == "night"
    assert title_window("Morning Meditation") == "morning"
    assert title_window("Mornings are hard") is None


def test_habit_goes_to_first_morning_slot(daily_input, habits) -> None:
    ctx = _context(daily_input)

    placement = place_item(ctx, QueueItem.from_habit(habits[0]))

    assert placement.block is not None
    assert (placement.block.start, placement.block.end) == ("07:30", "07:45")
    assert placement.block.id == "habit-habit-1"
    assert ctx.scheduled_ends["habit-1"] == to_minutes("07:45")
    assert ctx.last_category == "health"
    assert ctx.slots[0].start == to_minutes("07:55")


def test_evening_title_forces_evening_slot(daily_input, habits) -> None:
    ctx = _context(daily_input)

    placement = place_item(ctx, QueueItem.from_habit(habits[1]))

    assert placement.block is not None
    assert placement.block.start == "20:10"


def test_explicit_start_time_is_honoured(daily_input) -> None:
    ctx = _context(daily_input)
    habit = Habit(
        id="vitamins",
        name="Vitamins",
        duration=15,
        preferred_time_window="explicit",
        explicit_start_time="08:00",
    )

    placement = place_item(ctx, QueueItem.from_habit(habit))

    assert placement.block is not None
    assert placement.block.start == "08:00"


def test_explicit_start_outside_free_time_is_unscheduled(daily_input) -> None:
    ctx = _context(daily_input)
    habit = Habit(
        id="lunch-walk",
        name="Walk",
        duration=20,
        preferred_time_window="explicit",
        explicit_start_time="13:00",
    )

    placement = place_item(ctx, QueueItem.from_habit(habit))

    assert placement.block is None
    assert placement.reason == NO_SLOT_REASON


def test_fixed_flexibility_enforces_window(daily_input) -> None:
    ctx = _context(daily_input)
    habit = Habit(
        id="siesta",
        name="Siesta",
        duration=20,
        preferred_time_window="afternoon",
        flexibility="fixed",
    )

    placement = place_item(ctx, QueueItem.from_habit(habit))

    assert placement.reason == NO_SLOT_REASON


def test_business_hours_for_bank_errand() -> None:
    ctx = _context(_open_day())

    placement = place_item(ctx, _task_item("Bank deposit"))

    assert placement.block is not None
    assert placement.block.start == "09:00"


def test_business_hours_cap_the_end_time() -> None:
    window = start_window(_task_item("Pick up from clinic"))

    assert window.lo == to_minutes("09:00")
    assert window.end_limit == to_minutes("16:00")


def test_bank_closed_after_work_is_unscheduled(daily_input) -> None:
    ctx = _context(daily_input)

    placement = place_item(ctx, _task_item("Bank visit"))

    assert placement.block is None
    assert placement.reason == NO_SLOT_REASON


def test_missing_dependency_reason(daily_input) -> None:
    ctx = _context(daily_input)

    placement = place_item(ctx, _task_item("Write report", dependencies=["draft", "research"]))

    assert placement.block is None
    assert placement.reason == "Dependencies not met: draft, research"


def test_dependent_task_starts_after_dependency(daily_input) -> None:
    ctx = _context(daily_input)
    first = place_item(ctx, _task_item("Draft", id="draft"))
    second = place_item(ctx, _task_item("Polish", id="polish", dependencies=["draft"]))

    assert first.block is not None and second.block is not None
    assert to_minutes(second.block.start) >= to_minutes(first.block.end)


def test_placed_duration_shrinks_to_fit_slot() -> None:
    day = DailyInput(
        date="2024-01-15",
        sleep={"start": "23:00", "end": "07:00"},
        fixed_events=[{"title": "Work", "start": "08:00", "end": "22:00", "type": "work"}],
        constraints={"buffers_between_blocks_min": 10, "protect_downtime_min": 0},
    )
    ctx = _context(day)
    habit = Habit(id="read", name="Read", duration=60, minimum_viable_duration=20)

    placement = place_item(ctx, QueueItem.from_habit(habit))

    assert placement.block is not None
    assert (placement.block.start, placement.block.end) == ("07:00", "07:40")
    assert placement.block.original_duration == 60


def test_late_night_penalty_unless_night_tagged(daily_input) -> None:
    ctx = _context(daily_input)
    slot = TimeSlot(to_minutes("22:00"), to_minutes("23:00"))
    plain = _task_item("Tidy desk")
    night = _task_item("Night journal")

    assert score_candidate(night, slot.start, slot, ctx) - score_candidate(plain, slot.start, slot, ctx) == 35


def test_energy_alignment(daily_input) -> None:
    ctx = _context(daily_input)
    slot = TimeSlot(to_minutes("13:00"), to_minutes("14:00"))
    high = _task_item("Deep work", energy_level="high")
    low = _task_item("Deep work", energy_level="low")

    assert score_candidate(low, slot.start, slot, ctx) - score_candidate(high, slot.start, slot, ctx) == 50


def _slot(start: str, end: str) -> TimeSlot:
    return TimeSlot(to_minutes(start), to_minutes(end))


def test_snug_slots_score_higher(daily_input) -> None:
    ctx = _context(daily_input)
    item = _task_item("Quarterly report", duration=100)
    start = to_minutes("13:00")
    roomy = score_candidate(item, start, _slot("13:00", "17:10"), ctx)

    assert score_candidate(item, start, _slot("13:00", "15:10"), ctx) - roomy == 20
    assert score_candidate(item, start, _slot("13:00", "16:20"), ctx) - roomy == 10
    assert score_candidate(item, start, _slot("13:00", "19:40"), ctx) - roomy == -5


def test_same_category_as_previous_block(daily_input) -> None:
    ctx = _context(daily_input)
    item = _task_item("Sprint planning", category="work")
    slot = _slot("13:00", "14:00")

    ctx.last_category = "admin"
    switched = score_candidate(item, slot.start, slot, ctx)
    ctx.last_category = "work"
    continued = score_candidate(item, slot.start, slot, ctx)

    assert continued - switched == 15


def test_room_for_buffers_after_the_block(daily_input) -> None:
    ctx = _context(daily_input)
    item = _task_item("Tidy inbox")

    tight = score_candidate(item, to_minutes("13:00"), _slot("13:00", "13:40"), ctx)
    comfortable = score_candidate(item, to_minutes("13:00"), _slot("13:00", "13:55"), ctx)

    assert comfortable - tight == 10


def test_due_date_urgency(daily_input) -> None:
    ctx = _context(daily_input)
    slot = _slot("13:00", "14:00")
    baseline = score_candidate(_task_item("Pay rent"), slot.start, slot, ctx)

    def urgency(due: str) -> float:
        return score_candidate(_task_item("Pay rent", due_date=due), slot.start, slot, ctx) - baseline

    assert urgency("2024-01-12") == 50
    assert urgency("2024-01-15") == 30
    assert urgency("2024-01-17") == 15
    assert urgency("2024-01-18") == 0


def test_distance_from_explicit_time(daily_input) -> None:
    ctx = _context(daily_input)
    slot = _slot("10:00", "11:00")

    def score_for(clock: str) -> float:
        habit = Habit(
            id="stretch",
            name="Stretch",
            duration=30,
            preferred_time_window="explicit",
            explicit_start_time=clock,
        )
        return score_candidate(QueueItem.from_habit(habit), slot.start, slot, ctx)

    on_time = score_for("10:10")
    assert on_time - score_for("10:25") == 10
    assert on_time - score_for("10:50") == 20
    assert on_time - score_for("11:30") == 60


def test_neighbouring_energy_gets_partial_credit(daily_input) -> None:
    ctx = _context(daily_input)
    slot = _slot("09:00", "10:00")

    def score_for(level: str) -> float:
        return score_candidate(_task_item("Design review", energy_level=level), slot.start, slot, ctx)

    assert score_for("medium") - score_for("low") == 12.5
    assert score_for("high") - score_for("medium") == 12.5


def test_earlier_hours_break_ties(daily_input) -> None:
    ctx = _context(daily_input)
    item = _task_item("File receipts", energy_level="low")

    def score_at(start: str, end: str) -> float:
        slot = _slot(start, end)
        return score_candidate(item, slot.start, slot, ctx)

    assert score_at("13:00", "14:00") - score_at("14:00", "15:00") == 1
    assert score_at("19:00", "20:00") == score_at("20:00", "21:00")
