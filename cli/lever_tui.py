#!/usr/bin/env python3
"""Lever TUI — daily focus tracker powered by Textual."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import (
    Button,
    Checkbox,
    Collapsible,
    Footer,
    Header,
    Input,
    Label,
    ProgressBar,
    Static,
)

from lever import (
    JOURNEY_DAYS,
    MAX_TASKS,
    AppState,
    Session,
    Settings,
    export_path,
    hook_context,
    load_settings,
    run_hooks,
    save_settings,
    settings_path,
    setup_logging,
)
from lever.state import ANTI_VISION, DAY_COMPLETED, LOADED, ONBOARDING, TASKS, TIMER, VISION

logger = logging.getLogger("lever.tui")


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#progress-header {
    dock: top;
    height: 1;
    background: $primary-background;
    color: $text;
    padding: 0 2;
}

#main-scroll {
    height: 1fr;
    padding: 0 2;
}

.section-title {
    text-style: bold;
    color: $text-muted;
    margin: 1 0 0 0;
}

#vision-display {
    text-style: italic;
    content-align: center middle;
    margin: 1 0;
}

#timer-remaining {
    text-style: bold;
    content-align: center middle;
    height: 1;
}

#timer-buttons {
    height: auto;
    align: center middle;
}

.task-row {
    height: auto;
}

.task-row Checkbox {
    width: 1fr;
}

.task-done Checkbox {
    text-style: strike;
    opacity: 60%;
}

.delete-task {
    min-width: 5;
    width: 5;
}

#complete-day {
    width: 100%;
    margin: 1 0;
}

#day-completed {
    color: $success;
    text-style: bold;
    margin: 1 0;
}

.editor {
    display: none;
}

#onboarding {
    padding: 1 4;
}

#onboarding-title {
    text-style: bold;
    margin: 1 0;
}

#onboarding-error {
    color: $error;
    height: auto;
}
"""


# ── Widgets ────────────────────────────────────────────────────


class TaskCheckbox(Checkbox):
    """Checkbox bound to one lever task id."""

    def __init__(self, task_id: str, title: str, done: bool) -> None:
        super().__init__(title, value=done)
        self.task_id = task_id


class DeleteTaskButton(Button):
    def __init__(self, task_id: str) -> None:
        super().__init__("✕", variant="error", classes="delete-task")
        self.task_id = task_id


# ── Screens ────────────────────────────────────────────────────


class OnboardingScreen(Screen):
    """Vision, anti-vision and Day 1 in a single form."""

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="onboarding"):
            yield Label("Welcome to Lever", id="onboarding-title")
            yield Static("Focus on what moves the needle.\nOne hour. Three tasks. Every day.")
            yield Label("What's your vision?", classes="section-title")
            yield Input(placeholder="e.g., Build something meaningful that helps others", id="vision")
            yield Label("What's your anti-vision?", classes="section-title")
            yield Input(placeholder="e.g., Stuck in the same place, never growing", id="anti-vision")
            yield Label("When did you start? (YYYY-MM-DD)", classes="section-title")
            yield Input(value=self.app.state.today_key, id="start-date")
            yield Static(id="onboarding-error")
            yield Button("Start Journey", variant="primary", id="start-journey")
        yield Footer()

    @on(Button.Pressed, "#start-journey")
    @on(Input.Submitted, "#start-date")
    def _submit(self) -> None:
        vision = self.query_one("#vision", Input).value.strip()
        anti_vision = self.query_one("#anti-vision", Input).value.strip()
        raw_date = self.query_one("#start-date", Input).value.strip()
        error = self.query_one("#onboarding-error", Static)

        if not vision or not anti_vision:
            error.update("Vision and anti-vision are both required.")
            return
        try:
            start = date.fromisoformat(raw_date)
        except ValueError:
            error.update(f"Not a date: {raw_date!r}")
            return
        if start.isoformat() > self.app.state.today_key:
            error.update("Day 1 cannot be in the future.")
            return

        self.app.state.complete_onboarding(vision, anti_vision, start)
        self.app.switch_screen(MainScreen())


class MainScreen(Screen):
    """Progress header, vision, focus timer, levers and anti-vision."""

    BINDINGS = [
        Binding("v", "edit_vision", "Vision"),
        Binding("a", "edit_anti_vision", "Anti-Vision"),
        Binding("escape", "cancel_edit", "Back", show=False),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="progress-header")
        with VerticalScroll(id="main-scroll"):
            yield Static(id="vision-display")
            yield Input(id="vision-editor", classes="editor")

            yield Label("Focus", classes="section-title")
            yield ProgressBar(total=100, show_eta=False, show_percentage=False, id="timer-bar")
            yield Static(id="timer-remaining")
            with Horizontal(id="timer-buttons"):
                yield Button("Start", variant="primary", id="timer-toggle")
                yield Button("Reset", id="timer-reset")

            yield Label("Today's Levers", classes="section-title")
            yield Vertical(id="task-list")
            yield Input(placeholder="What moves the needle today?", id="new-task")
            yield Button("Complete Day", variant="success", id="complete-day")
            yield Static(id="day-completed")

            with Collapsible(title="Anti-Vision", collapsed=True, id="anti-vision"):
                yield Static(id="anti-vision-display")
                yield Input(id="anti-vision-editor", classes="editor")
        yield Footer()

    def on_mount(self) -> None:
        self._disconnect = self.app.session.add_new_task.connect(self.focus_new_task)
        self.refresh_from(self.app.state, LOADED)

    def on_unmount(self) -> None:
        self._disconnect()

    # ── Rendering ──────────────────────────────────────────────

    def refresh_from(self, state: AppState, change: str) -> None:
        if change in (TIMER, LOADED):
            self._render_timer(state)
        if change in (TASKS, DAY_COMPLETED, LOADED, ONBOARDING):
            self._render_tasks(state)
        if change in (VISION, ONBOARDING, LOADED):
            self.query_one("#vision-display", Static).update(f'"{state.vision}"')
        if change in (ANTI_VISION, ONBOARDING, LOADED):
            self.query_one("#anti-vision-display", Static).update(state.anti_vision)
        if change != TIMER:
            self._render_header(state)

    def _render_header(self, state: AppState) -> None:
        streak = state.current_streak
        flames = "🔥" * min(streak, 7) + (f" +{streak - 7}" if streak > 7 else "")
        if streak == 0:
            flames = "no streak yet"
        self.query_one("#progress-header", Static).update(
            f"Day {state.current_day} of {JOURNEY_DAYS}   {flames}"
        )

    def _render_timer(self, state: AppState) -> None:
        timer = state.timer_state
        self.query_one("#timer-bar", ProgressBar).update(progress=timer.progress * 100)
        label = "Done!" if timer.is_complete else timer.formatted_remaining
        self.query_one("#timer-remaining", Static).update(label)
        self.query_one("#timer-toggle", Button).label = "Pause" if timer.is_running else "Start"
        self.query_one("#timer-reset", Button).display = timer.elapsed > 0

    def _render_tasks(self, state: AppState) -> None:
        task_list = self.query_one("#task-list", Vertical)
        task_list.remove_children()
        for task in state.tasks:
            row = Horizontal(
                TaskCheckbox(task.id, task.title, task.is_completed),
                DeleteTaskButton(task.id),
                classes="task-row task-done" if task.is_completed else "task-row",
            )
            task_list.mount(row)

        new_task = self.query_one("#new-task", Input)
        new_task.display = state.can_add_task
        new_task.placeholder = f"Add a lever ({len(state.tasks)}/{MAX_TASKS})"

        complete = self.query_one("#complete-day", Button)
        complete.label = f"Complete Day {state.current_day}"
        complete.display = state.all_tasks_completed and not state.is_today_completed

        done = self.query_one("#day-completed", Static)
        done.update(f"Day {state.current_day} completed!" if state.is_today_completed else "")

    # ── Tasks ──────────────────────────────────────────────────

    def focus_new_task(self) -> None:
        if self.app.state.can_add_task:
            self.query_one("#new-task", Input).focus()

    @on(Input.Submitted, "#new-task")
    def _add_task(self, event: Input.Submitted) -> None:
        title = event.value.strip()
        if not title:
            return
        event.input.value = ""
        self.app.state.add_task(title)

    @on(Checkbox.Changed)
    def _toggle_task(self, event: Checkbox.Changed) -> None:
        if isinstance(event.checkbox, TaskCheckbox):
            self.app.state.toggle_task(event.checkbox.task_id)

    @on(Button.Pressed, ".delete-task")
    def _delete_task(self, event: Button.Pressed) -> None:
        if isinstance(event.button, DeleteTaskButton):
            self.app.state.delete_task(event.button.task_id)

    @on(Button.Pressed, "#complete-day")
    def _complete_day(self) -> None:
        self.app.state.mark_today_complete()

    # ── Timer ──────────────────────────────────────────────────

    @on(Button.Pressed, "#timer-toggle")
    def _toggle_timer(self) -> None:
        self.app.session.timer.toggle()

    @on(Button.Pressed, "#timer-reset")
    def _reset_timer(self) -> None:
        self.app.session.timer.reset()

    # ── Vision editing ─────────────────────────────────────────

    def _open_editor(self, editor_id: str, text: str) -> None:
        editor = self.query_one(editor_id, Input)
        editor.value = text
        editor.display = True
        editor.focus()

    def action_edit_vision(self) -> None:
        self._open_editor("#vision-editor", self.app.state.vision)

    def action_edit_anti_vision(self) -> None:
        self.query_one("#anti-vision", Collapsible).collapsed = False
        self._open_editor("#anti-vision-editor", self.app.state.anti_vision)

    def action_cancel_edit(self) -> None:
        for editor in self.query(".editor"):
            editor.display = False
        self.set_focus(None)

    @on(Input.Submitted, "#vision-editor")
    def _save_vision(self, event: Input.Submitted) -> None:
        event.input.display = False
        self.app.state.update_vision(event.value)

    @on(Input.Submitted, "#anti-vision-editor")
    def _save_anti_vision(self, event: Input.Submitted) -> None:
        event.input.display = False
        self.app.state.update_anti_vision(event.value)


# ── Main app ───────────────────────────────────────────────────


class LeverApp(App):
    """Lever — one hour, three tasks, every day."""

    TITLE = "Lever"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("ctrl+n", "add_task", "New Task"),
        Binding("space", "toggle_timer", "Start/Pause"),
        Binding("ctrl+r", "reset_timer", "Reset Timer"),
        Binding("ctrl+e", "export", "Export"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.session = Session(schedule=self._schedule_tick, on_timer_complete=self._on_timer_complete)

    @property
    def state(self) -> AppState:
        return self.session.state

    def _schedule_tick(self, interval: float, callback: Any) -> Any:
        return self.set_interval(interval, callback)

    def on_mount(self) -> None:
        self.session.open()
        self.state.subscribe(self._on_state_change)
        if self.state.has_completed_onboarding:
            self.push_screen(MainScreen())
        else:
            self.push_screen(OnboardingScreen())

    def _on_state_change(self, state: AppState, change: str) -> None:
        if isinstance(self.screen, MainScreen):
            self.screen.refresh_from(state, change)
        if change == DAY_COMPLETED:
            self.notify(f"Day {state.current_day} completed!", title="Lever")
            self._run_hooks("on_day_complete", hook_context(state))
        elif change == ONBOARDING:
            self._run_hooks("on_onboarding_complete", hook_context(state))

    def _on_timer_complete(self, state: AppState) -> None:
        self.notify("Focus block complete.", title="Timer")
        self.bell()
        self._run_hooks("on_timer_complete", hook_context(state))

    @work(thread=True)
    def _run_hooks(self, hook_point: str, context: dict[str, Any]) -> None:
        results = run_hooks(hook_point, context, self.session.storage.root)
        failed = [r for r in results if r.get("exit_code") != 0]
        if failed:
            self.call_from_thread(
                self.notify,
                f"{len(failed)} {hook_point} hook(s) failed; see lever.log",
                title="Hooks",
                severity="warning",
            )

    # ── Actions ────────────────────────────────────────────────

    def action_add_task(self) -> None:
        self.session.add_new_task.emit()

    def action_toggle_timer(self) -> None:
        if isinstance(self.screen, MainScreen):
            self.session.timer.toggle()

    def action_reset_timer(self) -> None:
        if isinstance(self.screen, MainScreen):
            self.session.timer.reset()

    def action_export(self) -> None:
        path = export_path(self.state.today_key, self.session.storage.root)
        if self.session.storage.write_export(self.state, path):
            self.notify(f"Exported to {path}", title="Export")
        else:
            self.notify("Export failed; see lever.log", title="Export", severity="error")

    def action_quit_app(self) -> None:
        if self.state.timer_state.is_running:
            self.session.timer.pause()
        self.session.close()
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    if not settings_path().exists():
        save_settings(Settings())
    settings = load_settings()
    log_file = setup_logging(settings.log_level)
    logger.info("Starting Lever (log: %s)", log_file)

    app = LeverApp()
    app.run()


if __name__ == "__main__":
    main()
