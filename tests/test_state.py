"""Tests for lever/state.py — mutations, guards, streaks, day counting."""

from datetime import timedelta

from lever.fileio import read_json
from lever.models import LeverTask, TimerState
from lever.state import AppState
from lever.workspace import data_path, start_of_day


def _days_ago(state: AppState, n: int) -> str:
    return (state.now().date() - timedelta(days=n)).isoformat()


# ── Tasks ─────────────────────────────────────────────────────


def test_add_task(state):
    state.add_task("Write the intro")
    assert len(state.tasks) == 1
    task = state.tasks[0]
    assert task.title == "Write the intro"
    assert task.is_completed is False
    assert task.id
    assert task.created_at.tzinfo is not None


def test_add_task_caps_at_three(state):
    for title in ["a", "b", "c"]:
        state.add_task(title)
    before = [t.to_dict() for t in state.tasks]

    state.add_task("d")
    state.add_task("e")

    assert [t.to_dict() for t in state.tasks] == before
    assert state.can_add_task is False


def test_add_task_empty_title_is_noop(state):
    state.add_task("")
    state.add_task("   ".strip())
    assert state.tasks == []
    assert not data_path().exists()


def test_tasks_keep_insertion_order(state):
    for title in ["first", "second", "third"]:
        state.add_task(title)
    assert [t.title for t in state.tasks] == ["first", "second", "third"]


def test_toggle_task_twice_restores(state):
    state.add_task("a")
    task = state.tasks[0]
    state.toggle_task(task)
    assert state.tasks[0].is_completed is True
    state.toggle_task(task)
    assert state.tasks[0].is_completed is False


def test_toggle_task_by_id(state):
    state.add_task("a")
    state.toggle_task(state.tasks[0].id)
    assert state.tasks[0].is_completed is True


def test_toggle_unknown_task_is_noop(state):
    state.add_task("a")
    state.toggle_task(LeverTask(title="stranger"))
    state.toggle_task("no-such-id")
    assert state.tasks[0].is_completed is False


def test_delete_task(state):
    state.add_task("a")
    state.add_task("b")
    state.delete_task(state.tasks[0])
    assert [t.title for t in state.tasks] == ["b"]
    state.delete_task(LeverTask(title="unknown"))
    assert [t.title for t in state.tasks] == ["b"]


def test_reset_tasks_for_new_day_preserves_identity(state):
    for title in ["a", "b", "c"]:
        state.add_task(title)
    state.toggle_task(state.tasks[0])
    state.toggle_task(state.tasks[2])
    before = [(t.id, t.title, t.created_at) for t in state.tasks]

    state.reset_tasks_for_new_day()

    assert [(t.id, t.title, t.created_at) for t in state.tasks] == before
    assert all(not t.is_completed for t in state.tasks)


def test_all_tasks_completed(state):
    assert state.all_tasks_completed is False
    state.add_task("a")
    state.add_task("b")
    state.toggle_task(state.tasks[0])
    assert state.all_tasks_completed is False
    state.toggle_task(state.tasks[1])
    assert state.all_tasks_completed is True


def test_check_for_new_day_resets_stale_tasks(state):
    state.add_task("a")
    state.toggle_task(state.tasks[0])
    state.tasks[0].created_at = state.now() - timedelta(days=1)

    assert state.check_for_new_day() is True
    assert state.tasks[0].is_completed is False


def test_check_for_new_day_same_day(state):
    state.add_task("a")
    state.toggle_task(state.tasks[0])
    assert state.check_for_new_day() is False
    assert state.tasks[0].is_completed is True


def test_check_for_new_day_without_tasks(state):
    assert state.check_for_new_day() is False


# ── Vision & onboarding ───────────────────────────────────────


def test_update_vision_is_verbatim(state):
    state.update_vision("  Build calm, useful software  ")
    state.update_anti_vision("")
    assert state.vision == "  Build calm, useful software  "
    assert state.anti_vision == ""


def test_complete_onboarding(state):
    start = state.now().date() - timedelta(days=3)
    state.complete_onboarding("Vision", "Anti", start)
    assert state.has_completed_onboarding is True
    assert state.vision == "Vision"
    assert state.anti_vision == "Anti"
    assert state.date_key(state.start_date) == start.isoformat()
    assert state.current_day == 4


def test_complete_onboarding_twice_overwrites(state):
    state.complete_onboarding("One", "Anti one", state.now())
    state.complete_onboarding("Two", "Anti two", state.now())
    assert state.vision == "Two"
    assert state.has_completed_onboarding is True


# ── Days & streaks ────────────────────────────────────────────


def test_current_day_starts_at_one(state):
    state.start_date = start_of_day(state.now())
    assert state.current_day == 1


def test_current_day_counts_calendar_days(state):
    state.start_date = state.now() - timedelta(days=5)
    assert state.current_day == 6


def test_today_key_format(state):
    key = state.today_key
    assert len(key) == 10
    assert key == state.now().date().isoformat()


def test_mark_today_complete_is_idempotent(state):
    state.mark_today_complete()
    state.mark_today_complete()
    assert state.completed_days == {state.today_key}
    assert state.is_today_completed is True


def test_date_key_ignores_time_of_day(state):
    morning = start_of_day(state.now()) + timedelta(hours=1)
    evening = start_of_day(state.now()) + timedelta(hours=23)
    assert state.date_key(morning) == state.date_key(evening) == state.today_key


def test_streak_empty(state):
    assert state.current_streak == 0


def test_streak_counts_through_yesterday(state):
    state.completed_days = {_days_ago(state, 1), _days_ago(state, 2)}
    assert state.current_streak == 2

    state.mark_today_complete()
    assert state.current_streak == 3

    state.completed_days.discard(_days_ago(state, 2))
    assert state.current_streak == 2


def test_streak_broken_by_gap_before_yesterday(state):
    state.completed_days = {_days_ago(state, 2), _days_ago(state, 3)}
    assert state.current_streak == 0


def test_streak_today_only(state):
    state.mark_today_complete()
    assert state.current_streak == 1


def test_streak_yesterday_only_with_today_open(state):
    state.completed_days = {_days_ago(state, 1)}
    assert state.is_today_completed is False
    assert state.current_streak == 1


def test_timezone_is_read_once(workspace, caplog):
    (workspace / "settings.yaml").write_text("timezone: [unclosed", encoding="utf-8")
    state = AppState()
    state.completed_days = {_days_ago(state, 1)}

    assert state.current_streak == 1
    assert state.current_day == 1
    assert state.is_today_completed is False
    state.add_task("one")

    assert caplog.text.count("Could not read settings") == 1


# ── Timer ─────────────────────────────────────────────────────


def test_reset_timer(state):
    state.timer_state = TimerState(duration=60, elapsed=42, is_running=True)
    state.reset_timer()
    assert state.timer_state == TimerState()


# ── Persistence & observers ───────────────────────────────────


def test_every_mutation_saves(state):
    state.add_task("Persist me")
    assert read_json(data_path())["tasks"][0]["title"] == "Persist me"

    state.update_vision("Saved vision")
    assert read_json(data_path())["vision"] == "Saved vision"

    state.mark_today_complete()
    assert read_json(data_path())["completedDays"] == [state.today_key]


def test_state_without_storage_still_mutates():
    s = AppState()
    s.add_task("in memory")
    assert len(s.tasks) == 1


def test_observers_receive_change_names(state):
    seen = []
    unsubscribe = state.subscribe(lambda s, change: seen.append(change))

    state.add_task("a")
    state.update_vision("v")
    state.mark_today_complete()
    state.reset_timer()
    unsubscribe()
    state.update_anti_vision("ignored")

    assert seen == ["tasks", "vision", "day_completed", "timer"]


def test_noop_mutation_does_not_notify(state):
    seen = []
    state.subscribe(lambda s, change: seen.append(change))
    state.add_task("")
    state.toggle_task("missing")
    assert seen == []


def test_failing_observer_does_not_block_others(state, caplog):
    seen = []

    def broken(s, change):
        raise RuntimeError("boom")

    state.subscribe(broken)
    state.subscribe(lambda s, change: seen.append(change))
    state.add_task("a")

    assert seen == ["tasks"]
    assert len(state.tasks) == 1
    assert "observer failed" in caplog.text


def test_snapshot_round_trip(state):
    state.complete_onboarding("Vision ✨", "Anti", state.now())
    state.add_task("a")
    other = AppState()
    other.load_from(state.to_snapshot())
    assert other.to_snapshot() == state.to_snapshot()


def test_snapshot_is_a_copy(state):
    state.add_task("a")
    snap = state.to_snapshot()
    state.toggle_task(state.tasks[0])
    assert snap.tasks[0].is_completed is False
