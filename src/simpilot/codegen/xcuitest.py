"""XCUITest source generation from recorded sessions.

Generation is plain templating: the output is not compiled, and element
labels are not checked against the running app.
"""

from dataclasses import dataclass

from ..recording.types import ActionKind, AutomationSession, RecordedAction

INDENT = "        "

ELEMENT_ACCESSORS = {
    "XCUIElementTypeButton": "buttons",
    "XCUIElementTypeTextField": "textFields",
    "XCUIElementTypeSecureTextField": "secureTextFields",
    "XCUIElementTypeTextView": "textViews",
    "XCUIElementTypeStaticText": "staticTexts",
    "XCUIElementTypeLink": "links",
    "XCUIElementTypeImage": "images",
    "XCUIElementTypeSwitch": "switches",
    "XCUIElementTypeSlider": "sliders",
    "XCUIElementTypeCell": "cells",
    "XCUIElementTypeTable": "tables",
    "XCUIElementTypeCollectionView": "collectionViews",
    "XCUIElementTypeNavigationBar": "navigationBars",
    "XCUIElementTypeTabBar": "tabBars",
}
DEFAULT_ACCESSOR = "otherElements"


def map_element_type(element_type: str | None) -> str:
    """Map an element type tag to its XCUIApplication query accessor."""
    return ELEMENT_ACCESSORS.get(element_type or "", DEFAULT_ACCESSOR)


def swipe_direction(from_x: float, from_y: float, to_x: float, to_y: float) -> str:
    """Classify a swipe as up, down, left or right.

    The axis with the larger absolute delta wins; ties count as vertical.

    Example:
        >>> swipe_direction(0, 0, 30, 100)
        'down'
    """
    dx = to_x - from_x
    dy = to_y - from_y
    if abs(dx) > abs(dy):
        return "right" if dx > 0 else "left"
    return "down" if dy > 0 else "up"


SWIFT_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}

# XCUIKeyboardKey members for recorded special keys
SWIFT_KEYS = {
    "return": "return",
    "tab": "tab",
    "delete": "delete",
    "escape": "escape",
    "space": "space",
    "home": "home",
    "up arrow": "upArrow",
    "down arrow": "downArrow",
    "left arrow": "leftArrow",
    "right arrow": "rightArrow",
}


def escape_swift_string(text: str) -> str:
    """Escape text for a Swift string literal.

    Line breaks and other control characters become escape sequences, so the
    literal always stays on one source line.
    """
    escaped = []
    for char in text:
        if char in SWIFT_ESCAPES:
            escaped.append(SWIFT_ESCAPES[char])
        elif not char.isprintable():
            escaped.append(f"\\u{{{ord(char):x}}}")
        else:
            escaped.append(char)
    return "".join(escaped)


def comment_text(text: str) -> str:
    """Flatten text onto one line for a ``//`` comment."""
    return "".join(char if char.isprintable() else " " for char in text)


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _coordinate(x: str, y: str) -> str:
    return (
        "app.coordinate(withNormalizedOffset: CGVector(dx: 0, dy: 0))"
        f".withOffset(CGVector(dx: {x}, dy: {y}))"
    )


@dataclass(frozen=True)
class SynthesisOptions:
    """Options for generated test source."""

    test_name: str = "testRecordedFlow"
    class_name: str = "RecordedUITests"
    include_comments: bool = True


class XCUITestSynthesizer:
    """Turns an AutomationSession into an XCTestCase subclass."""

    def synthesize(
        self, session: AutomationSession, options: SynthesisOptions | None = None
    ) -> str:
        """Generate Swift source for the session.

        Args:
            session: Recording to compile
            options: Naming and comment options

        Returns:
            Swift source text
        """
        options = options or SynthesisOptions()
        launch = self._app_declaration(session.bundle_id)

        lines = [
            "import XCTest",
            "",
            f"class {options.class_name}: XCTestCase {{",
            "",
            "    override func setUpWithError() throws {",
            f"{INDENT}continueAfterFailure = false",
            f"{INDENT}{launch}",
            f"{INDENT}app.launch()",
            "    }",
            "",
            f"    func {options.test_name}() throws {{",
            f"{INDENT}{launch}",
            "",
        ]

        for action in session.recorded_actions:
            lines.extend(self.action_lines(action, options.include_comments))

        lines.extend(["    }", "}", ""])
        return "\n".join(lines)

    @staticmethod
    def _app_declaration(bundle_id: str | None) -> str:
        if bundle_id:
            return f'let app = XCUIApplication(bundleIdentifier: "{escape_swift_string(bundle_id)}")'
        return "let app = XCUIApplication()"

    def action_lines(self, action: RecordedAction, include_comments: bool = True) -> list[str]:
        """Statements (and optional comment) for one recorded action.

        Actions missing the payload their kind needs produce no lines.
        """
        comment, statement = self._translate(action)
        if statement is None:
            return []
        if include_comments and comment:
            return [f"{INDENT}// {comment_text(comment)}", f"{INDENT}{statement}"]
        return [f"{INDENT}{statement}"]

    def _translate(self, action: RecordedAction) -> tuple[str | None, str | None]:
        element = action.element

        if action.kind == ActionKind.TAP:
            if element is not None and element.label:
                query = self._element_query(element.type, element.label)
                return f'Tap on "{element.label}"', f"{query}.tap()"
            if action.coordinates is not None:
                x, y = (_num(c) for c in action.coordinates)
                return f"Tap at coordinates ({x}, {y})", f"{_coordinate(x, y)}.tap()"
            return None, None

        if action.kind == ActionKind.TYPE:
            if not action.text:
                return None, None
            text = escape_swift_string(action.text)
            if element is not None and element.label:
                query = self._element_query(element.type, element.label)
                return f'Type into "{element.label}"', f'{query}.typeText("{text}")'
            return "Type text", f'app.typeText("{text}")'

        if action.kind == ActionKind.SWIPE:
            if action.swipe is None:
                return None, None
            s = action.swipe
            direction = swipe_direction(s.from_x, s.from_y, s.to_x, s.to_y)
            return f"Swipe {direction}", f"app.swipe{direction.capitalize()}()"

        if action.kind == ActionKind.WAIT:
            if not action.duration_ms:
                return None, None
            seconds = _num(action.duration_ms / 1000)
            return f"Wait {seconds} seconds", f"Thread.sleep(forTimeInterval: {seconds})"

        if action.kind == ActionKind.SCREENSHOT:
            return "Take screenshot", "add(XCTAttachment(screenshot: app.screenshot()))"

        if action.kind in (ActionKind.LONG_PRESS, ActionKind.DOUBLE_TAP):
            if action.coordinates is None:
                return None, None
            x, y = (_num(c) for c in action.coordinates)
            if action.kind == ActionKind.DOUBLE_TAP:
                return f"Double tap at ({x}, {y})", f"{_coordinate(x, y)}.doubleTap()"
            seconds = _num((action.duration_ms or 0) / 1000)
            return (
                f"Long press at ({x}, {y}) for {seconds} seconds",
                f"{_coordinate(x, y)}.press(forDuration: {seconds})",
            )

        if action.kind == ActionKind.KEY:
            if not action.key:
                return None, None
            return self._key_statement(action.key, action.modifiers)

        return None, None

    @staticmethod
    def _key_statement(key: str, modifiers: tuple[str, ...]) -> tuple[str, str]:
        if key in SWIFT_KEYS:
            target = f"XCUIKeyboardKey.{SWIFT_KEYS[key]}"
        else:
            target = f'"{escape_swift_string(key)}"'
        flags = ", ".join(f".{m}" for m in modifiers)
        chord = "+".join([*modifiers, key])
        return f"Press {chord}", f"app.typeKey({target}, modifierFlags: [{flags}])"

    @staticmethod
    def _element_query(element_type: str, label: str) -> str:
        return f'app.{map_element_type(element_type)}["{escape_swift_string(label)}"]'
