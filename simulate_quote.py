#!/usr/bin/env python3
from __future__ import annotations

"""
Headless session runner for the quick quote core.

Responsibilities:
- Configure logging to both console and `logs/quote.log`
- Load the product/fee configuration (YAML)
- Build one application session with a manual scheduler
- Replay a recorded session file, step by step:
  * `event` + optional `payload`: publish an event on the bus
  * `keys`: a space separated list of keypad keys (`1 2 0 0 ENT`)
  * `choice`: answer the oldest pending choice prompt
  * `advance`: move the scheduler clock forward (seconds)
- Print the resulting items, notifications and the fee summary

Example session file:

    steps:
      - advance: 0.2
      - keys: "1 2 0 0 ENT 1 5 0 0 ENT"
      - event: TYPE_CELL_LONG_PRESS
        payload: {row_index: 0}
      - choice: BO
      - event: CALCULATE_SUM_CLICKED
"""

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from quick_quote.app_context import QuoteApplication, build_application
from quick_quote.config_manager import ConfigManager
from quick_quote.errors import ConfigurationError
from quick_quote.events import Events
from quick_quote.io_paths import LOGS_DIR, SESSIONS_DIR
from quick_quote.ui_logic.scheduler import ManualScheduler
from quick_quote.utils_logging import configure_logging


@dataclass
class SessionTranscript:
    """What the collaborators would have been asked to show."""
    notifications: List[Dict[str, Any]] = field(default_factory=list)
    dialogs: List[Dict[str, Any]] = field(default_factory=list)
    state_changes: int = 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Quick quote – headless session runner")
    p.add_argument("--session", type=str, required=True, help="Path to a session YAML file, or a name under 'sessions/'")
    p.add_argument("--config", type=str, help="Path to a configuration YAML file (defaults to the packaged one)")
    p.add_argument("--debug", action="store_true")
    return p.parse_args(argv)


def _resolve_session_path(session: str) -> Path:
    """Return `session` as a path, falling back to `sessions/<name>.yaml`."""
    path = Path(session)
    if path.exists():
        return path
    candidate = SESSIONS_DIR / f"{session}.yaml"
    if candidate.exists():
        return candidate
    raise ConfigurationError(f"Session file not found: {session}")


def load_session(path: Path) -> List[Mapping[str, Any]]:
    """Load and shape-check the `steps` list of a session file."""
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read session {path}: {exc}") from exc

    steps = data.get("steps") if isinstance(data, Mapping) else None
    if not isinstance(steps, list):
        raise ConfigurationError(f"Session {path} must contain a 'steps' list")
    for idx, step in enumerate(steps):
        if not isinstance(step, Mapping) or not ({"event", "keys", "choice", "advance"} & set(step)):
            raise ConfigurationError(f"Session step {idx} must have one of event/keys/choice/advance: {step!r}")
    return steps


def _event_from_name(name: str) -> Events:
    try:
        return Events(name)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown event '{name}' in session") from exc


def run_session(app: QuoteApplication, steps: List[Mapping[str, Any]], log: logging.Logger) -> SessionTranscript:
    """Replay `steps` against a running application and collect a transcript."""
    transcript = SessionTranscript()
    app.event_bus.subscribe(Events.SHOW_NOTIFICATION, transcript.notifications.append)
    app.event_bus.subscribe(Events.SHOW_CONFIRMATION_DIALOG, transcript.dialogs.append)

    def _count_state_change(_state) -> None:
        transcript.state_changes += 1

    app.event_bus.subscribe(Events.STATE_CHANGED, _count_state_change)

    for idx, step in enumerate(steps):
        if "advance" in step:
            ran = app.scheduler.advance(float(step["advance"]))
            log.debug("Step %d: advanced %.3fs, %d task(s) ran", idx, float(step["advance"]), ran)
        elif "keys" in step:
            for key in str(step["keys"]).split():
                app.publish(Events.NUMERIC_KEY_PRESSED, {"key": key})
        elif "choice" in step:
            pending = app.dialog_broker.pending_requests()
            if not pending:
                raise ConfigurationError(f"Session step {idx} answers a prompt but none is pending")
            app.publish(
                Events.DIALOG_CHOICE_SELECTED,
                {"request_id": pending[0].request_id, "choice_id": str(step["choice"])},
            )
        else:
            app.publish(_event_from_name(str(step["event"])), step.get("payload"))
    return transcript


def print_summary(app: QuoteApplication, transcript: SessionTranscript) -> None:
    state = app.get_state()
    product = state.quote_data.current()
    print(f"Product: {state.quote_data.current_product}")
    print(f"{'#':>3}  {'Width':>6}  {'Height':>6}  {'Type':<5}  {'Price':>9}")
    for i, item in enumerate(product.items, start=1):
        price = "" if item.line_price is None else f"{item.line_price:.2f}"
        print(
            f"{i:>3}  {item.width if item.width is not None else '':>6}  "
            f"{item.height if item.height is not None else '':>6}  {item.fabric_type or '':<5}  {price:>9}"
        )
    print(f"Total: {product.summary.total_price:.2f} ({product.summary.total_count} items)"
          f"{'  [outdated]' if state.ui.sum_outdated else ''}")

    f2 = state.ui.f2
    if f2.total is not None:
        for key, value in f2.derived_values().items():
            print(f"  {key:<20} {value}")
    for note in transcript.notifications:
        print(f"[{note.get('type', 'info')}] {note.get('message')}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(LOGS_DIR, debug=args.debug)
    log = logging.getLogger("quote-runner")

    try:
        config = ConfigManager.from_file(Path(args.config) if args.config else None)
        session_path = _resolve_session_path(args.session)
        steps = load_session(session_path)
        log.info("Loaded session %s with %d step(s)", session_path, len(steps))

        app = build_application(config, scheduler=ManualScheduler())
        app.run()
        try:
            transcript = run_session(app, steps, log)
        finally:
            app.shutdown()
    except ConfigurationError as e:
        log.error("Configuration error: %s", e)
        return 1

    print_summary(app, transcript)
    log.info("Session finished: %d state change(s), %d notification(s)",
             transcript.state_changes, len(transcript.notifications))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
