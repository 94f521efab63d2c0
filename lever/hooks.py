"""Shell hooks for Lever milestones.

Hooks run shell commands when something worth announcing happens, e.g. a
desktop notification when the focus timer runs out. Configured via
hooks.yaml in the data directory:

    on_timer_complete:
      - notify-send "Lever" "Focus block done"
    on_day_complete:
      - command: ./scripts/log-day.sh
        timeout: 10

Hook points:
- on_timer_complete
- on_day_complete
- on_onboarding_complete
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from lever.fileio import read_yaml
from lever.workspace import data_root, hooks_config_path

if TYPE_CHECKING:
    from lever.state import AppState

logger = logging.getLogger(__name__)


VALID_HOOK_POINTS = {
    "on_timer_complete",
    "on_day_complete",
    "on_onboarding_complete",
}

DEFAULT_TIMEOUT = 30
OUTPUT_CAP = 4096


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    """Load hooks configuration from hooks.yaml."""
    path = hooks_config_path(root)
    if not path.exists():
        return {}
    try:
        return read_yaml(path)
    except (OSError, ValueError, yaml.YAMLError):
        logger.warning("Ignoring unreadable hooks config %s", path, exc_info=True)
        return {}


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run all hooks registered for a given hook point.

    Context is passed as JSON via stdin to each hook subprocess.
    Returns list of results with stdout/stderr and exit codes.
    """
    if hook_point not in VALID_HOOK_POINTS:
        return []

    if root is None:
        root = data_root()

    hooks = load_hooks_config(root).get(hook_point, [])
    if not hooks or not isinstance(hooks, list):
        return []

    results = []
    context_json = json.dumps(context, ensure_ascii=False)

    for hook in hooks:
        if isinstance(hook, str):
            command = hook
            timeout = DEFAULT_TIMEOUT
        elif isinstance(hook, dict):
            command = hook.get("command", "")
            timeout = hook.get("timeout", DEFAULT_TIMEOUT)
        else:
            continue

        if not command:
            continue

        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=context_json,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root),
            )
            result["exit_code"] = proc.returncode
            result["stdout"] = proc.stdout[:OUTPUT_CAP]
            result["stderr"] = proc.stderr[:OUTPUT_CAP]
            if proc.returncode != 0:
                logger.warning("Hook %r for %s exited with %d", command, hook_point, proc.returncode)
        except subprocess.TimeoutExpired:
            result["exit_code"] = -1
            result["error"] = f"Hook timed out after {timeout}s"
            logger.warning("Hook %r for %s timed out after %ss", command, hook_point, timeout)
        except (OSError, ValueError) as e:
            result["exit_code"] = -1
            result["error"] = str(e)
            logger.warning("Hook %r for %s failed: %s", command, hook_point, e)

        results.append(result)

    return results


def hook_context(state: AppState) -> dict[str, Any]:
    """JSON-safe summary of *state* handed to hooks on stdin."""
    return {
        "day": state.current_day,
        "today": state.today_key,
        "streak": state.current_streak,
        "todayCompleted": state.is_today_completed,
        "vision": state.vision,
        "tasks": [t.to_dict() for t in state.tasks],
        "timerState": state.timer_state.to_dict(),
    }
