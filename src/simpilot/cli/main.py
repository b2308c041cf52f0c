"""simpilot CLI - Main entry point.

Drives the booted iOS Simulator from the command line. Every command prints
its result as JSON on stdout; logs go to stderr.

Exit codes:
    0: Success
    1: Action failed
    2: Invalid input (bad arguments, unreadable flow file)
"""

import asyncio
import json
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

import click

from .. import __version__
from ..automation import AutomationService
from ..config import SimpilotSettings, set_settings
from ..context import initialize_automation
from ..logging import setup_logging

# Exit codes
EXIT_SUCCESS = 0
EXIT_ACTION_FAILED = 1
EXIT_INPUT_ERROR = 2


def _service(ctx: click.Context) -> AutomationService:
    """Get the service for this invocation, creating it on first use."""
    obj = ctx.find_root().obj
    if obj.get("service") is None:
        settings = SimpilotSettings(**obj.get("overrides", {}))
        set_settings(settings)
        obj["service"] = AutomationService(initialize_automation(settings))
    return obj["service"]


def _run(coro: Coroutine[Any, Any, dict[str, Any]]) -> dict[str, Any]:
    return asyncio.run(coro)


def _emit(result: dict[str, Any]) -> None:
    """Print a result and exit with the matching code."""
    click.echo(json.dumps(result, indent=2, default=str))
    sys.exit(EXIT_SUCCESS if result.get("success", True) else EXIT_ACTION_FAILED)


def load_flow_file(flow_path: str) -> list[dict[str, Any]] | None:
    """Load a JSON flow: a list of steps or an object with a ``steps`` list.

    Returns:
        The steps, or None if the file is not a valid flow
    """
    try:
        with open(flow_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        click.echo(f"Error: Could not read flow file {flow_path}: {e}", err=True)
        return None

    steps = data.get("steps") if isinstance(data, dict) else data
    if not isinstance(steps, list):
        click.echo("Error: Flow must be a list of steps or an object with 'steps'", err=True)
        return None
    return steps


@click.group()
@click.version_option(version=__version__, prog_name="simpilot")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--udid", help="Target simulator UDID (default: first booted)")
@click.option("--wda-port", type=int, help="WebDriverAgent port")
@click.pass_context
def main(ctx: click.Context, verbose: bool, udid: str | None, wda_port: int | None) -> None:
    """simpilot - iOS Simulator UI automation.

    Tap, type, swipe and press keys through the best available backend,
    inspect the element tree and turn recorded flows into XCUITest code.
    """
    ctx.ensure_object(dict)
    overrides: dict[str, Any] = {}
    if udid:
        overrides["device_udid"] = udid
    if wda_port:
        overrides["wda_port"] = wda_port
    ctx.obj.setdefault("overrides", overrides)
    setup_logging(level="DEBUG" if verbose else "WARNING", structured=False, colorize=False)


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show which automation backends are available."""
    result = _run(_service(ctx).get_status())
    result["success"] = True
    _emit(result)


@main.command()
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.pass_context
def tap(ctx: click.Context, x: float, y: float) -> None:
    """Tap at device coordinates X Y."""
    _emit(_run(_service(ctx).tap(x, y)))


@main.command(name="type")
@click.argument("text")
@click.pass_context
def type_cmd(ctx: click.Context, text: str) -> None:
    """Type TEXT into the focused element."""
    _emit(_run(_service(ctx).type_text(text)))


@main.command()
@click.argument("from_x", type=float)
@click.argument("from_y", type=float)
@click.argument("to_x", type=float)
@click.argument("to_y", type=float)
@click.option("--duration", type=click.IntRange(min=0), help="Duration in milliseconds")
@click.pass_context
def swipe(
    ctx: click.Context,
    from_x: float,
    from_y: float,
    to_x: float,
    to_y: float,
    duration: int | None,
) -> None:
    """Swipe from FROM_X FROM_Y to TO_X TO_Y."""
    _emit(_run(_service(ctx).swipe(from_x, from_y, to_x, to_y, duration)))


@main.command(name="long-press")
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.option("--duration", type=click.IntRange(min=0), help="Hold time in milliseconds")
@click.pass_context
def long_press(ctx: click.Context, x: float, y: float, duration: int | None) -> None:
    """Touch and hold at device coordinates X Y."""
    _emit(_run(_service(ctx).long_press(x, y, duration)))


@main.command(name="double-tap")
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.pass_context
def double_tap(ctx: click.Context, x: float, y: float) -> None:
    """Double tap at device coordinates X Y."""
    _emit(_run(_service(ctx).double_tap(x, y)))


@main.command()
@click.argument("key_name")
@click.option(
    "--modifier",
    "-m",
    "modifiers",
    multiple=True,
    type=click.Choice(["command", "cmd", "shift", "option", "alt", "control", "ctrl"]),
    help="Modifier to hold (repeatable)",
)
@click.pass_context
def key(ctx: click.Context, key_name: str, modifiers: tuple[str, ...]) -> None:
    """Press KEY_NAME: return, tab, delete, escape, space, home, an arrow or a character."""
    _emit(_run(_service(ctx).press_key(key_name, list(modifiers))))


@main.command(name="dismiss-keyboard")
@click.pass_context
def dismiss_keyboard(ctx: click.Context) -> None:
    """Hide the software keyboard."""
    _emit(_run(_service(ctx).dismiss_keyboard()))


@main.command()
@click.argument("direction", type=click.Choice(["up", "down", "left", "right"]))
@click.option("--amount", type=click.FloatRange(min=0, min_open=True), help="Distance in pixels")
@click.pass_context
def scroll(ctx: click.Context, direction: str, amount: float | None) -> None:
    """Scroll DIRECTION with the arrow keys."""
    _emit(_run(_service(ctx).scroll(direction, amount)))


@main.command(name="find-tap")
@click.option("--label", help="Label substring")
@click.option("--type", "element_type", help="Element type substring")
@click.option("--text", "contains_text", help="Text in label or value")
@click.option("--index", type=click.IntRange(min=0), default=0, help="Which match to tap")
@click.pass_context
def find_tap(
    ctx: click.Context,
    label: str | None,
    element_type: str | None,
    contains_text: str | None,
    index: int,
) -> None:
    """Find an element and tap it."""
    if not (label or element_type or contains_text):
        click.echo("Error: Provide at least one of --label, --type or --text", err=True)
        sys.exit(EXIT_INPUT_ERROR)
    _emit(_run(_service(ctx).find_and_tap(label, element_type, contains_text, index)))


@main.command(name="find-type")
@click.argument("text")
@click.option("--label", help="Label substring of the text field")
@click.option("--placeholder", help="Placeholder or value substring")
@click.option("--index", type=click.IntRange(min=0), default=0, help="Which match to use")
@click.pass_context
def find_type(
    ctx: click.Context, text: str, label: str | None, placeholder: str | None, index: int
) -> None:
    """Find a text field and type TEXT into it."""
    _emit(_run(_service(ctx).find_and_type(text, label, placeholder, index)))


@main.command()
@click.option("--screenshot/--no-screenshot", default=False, help="Capture a screenshot too")
@click.pass_context
def analyze(ctx: click.Context, screenshot: bool) -> None:
    """Summarize the interactive elements on screen."""
    _emit(_run(_service(ctx).analyze_screen(include_screenshot=screenshot)))


@main.command()
@click.pass_context
def tree(ctx: click.Context) -> None:
    """Print the raw element tree."""
    _emit(_run(_service(ctx).get_element_tree()))


@main.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Destination PNG")
@click.pass_context
def screenshot(ctx: click.Context, output: str | None) -> None:
    """Capture the simulator screen."""
    _emit(_run(_service(ctx).screenshot(output)))


@main.command(name="run-flow")
@click.argument("flow_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--record", is_flag=True, help="Record the flow and generate XCUITest code")
@click.option("--bundle-id", help="Bundle identifier of the app under test")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write test code here")
@click.option(
    "--screenshot-on-error/--no-screenshot-on-error", default=True, help="Capture failures"
)
@click.pass_context
def run_flow(
    ctx: click.Context,
    flow_path: str,
    record: bool,
    bundle_id: str | None,
    output: str | None,
    screenshot_on_error: bool,
) -> None:
    """Run the steps in FLOW_PATH (JSON).

    Each step has an "action" (tap, type, swipe, wait, screenshot,
    long_press, double_tap, key) plus "target", "text", "coordinates",
    "swipe", "duration", "key" or "modifiers" as needed.
    """
    steps = load_flow_file(flow_path)
    if steps is None:
        sys.exit(EXIT_INPUT_ERROR)

    result = _run(
        _service(ctx).run_flow(
            steps,
            record_for_test=record,
            bundle_id=bundle_id,
            screenshot_on_error=screenshot_on_error,
        )
    )
    if output and result.get("testCode"):
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(result["testCode"], encoding="utf-8")
        result["testPath"] = str(path)
    _emit(result)


if __name__ == "__main__":
    main()
