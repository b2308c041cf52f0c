"""Key names understood by key-capable backends.

A key is either a special ``Key`` or a single printable character. Callers
may use common aliases ("enter", "backspace", "up", "cmd"); parse_key and
parse_modifiers resolve them to the canonical names below.
"""

from collections.abc import Iterable
from enum import Enum


class Key(str, Enum):
    """Special keys, named the way System Events names them."""

    RETURN = "return"
    TAB = "tab"
    DELETE = "delete"
    ESCAPE = "escape"
    SPACE = "space"
    HOME = "home"
    UP = "up arrow"
    DOWN = "down arrow"
    LEFT = "left arrow"
    RIGHT = "right arrow"


class Modifier(str, Enum):
    """Modifier keys held down during a key press."""

    COMMAND = "command"
    SHIFT = "shift"
    OPTION = "option"
    CONTROL = "control"


KEY_ALIASES: dict[str, Key] = {
    "enter": Key.RETURN,
    "return": Key.RETURN,
    "tab": Key.TAB,
    "delete": Key.DELETE,
    "backspace": Key.DELETE,
    "escape": Key.ESCAPE,
    "esc": Key.ESCAPE,
    "space": Key.SPACE,
    "home": Key.HOME,
    "up": Key.UP,
    "up arrow": Key.UP,
    "down": Key.DOWN,
    "down arrow": Key.DOWN,
    "left": Key.LEFT,
    "left arrow": Key.LEFT,
    "right": Key.RIGHT,
    "right arrow": Key.RIGHT,
}

MODIFIER_ALIASES: dict[str, Modifier] = {
    "command": Modifier.COMMAND,
    "cmd": Modifier.COMMAND,
    "shift": Modifier.SHIFT,
    "option": Modifier.OPTION,
    "alt": Modifier.OPTION,
    "control": Modifier.CONTROL,
    "ctrl": Modifier.CONTROL,
}

# USB HID usage ids, as taken by ``idb ui key`` and ``axe key``
HID_KEY_CODES: dict[Key, int] = {
    Key.RETURN: 40,
    Key.ESCAPE: 41,
    Key.DELETE: 42,
    Key.TAB: 43,
    Key.SPACE: 44,
    Key.HOME: 74,
    Key.RIGHT: 79,
    Key.LEFT: 80,
    Key.DOWN: 81,
    Key.UP: 82,
}


def parse_key(key: str) -> Key | str:
    """Resolve a key name.

    Args:
        key: Special key name or alias, or a single character

    Returns:
        A Key for special keys, otherwise the character itself

    Raises:
        ValueError: If the key is empty or an unknown multi-character name

    Example:
        >>> parse_key("Enter")
        <Key.RETURN: 'return'>
        >>> parse_key("k")
        'k'
    """
    special = KEY_ALIASES.get(key.strip().lower())
    if special is not None:
        return special
    if len(key) != 1:
        raise ValueError(f"Unknown key: {key!r}")
    return key


def parse_modifiers(modifiers: Iterable[str]) -> tuple[Modifier, ...]:
    """Resolve modifier names, dropping duplicates and keeping order.

    Raises:
        ValueError: If a modifier is unknown
    """
    result: list[Modifier] = []
    for name in modifiers:
        modifier = MODIFIER_ALIASES.get(name.strip().lower())
        if modifier is None:
            raise ValueError(f"Unknown modifier: {name!r}")
        if modifier not in result:
            result.append(modifier)
    return tuple(result)


def key_name(key: Key | str) -> str:
    return key.value if isinstance(key, Key) else key


def describe_key(key: Key | str, modifiers: Iterable[Modifier] = ()) -> str:
    """Render a chord such as ``command+shift+k``."""
    return "+".join([m.value for m in modifiers] + [key_name(key)])
