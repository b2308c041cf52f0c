"""Test source generation."""

from .xcuitest import (
    SynthesisOptions,
    XCUITestSynthesizer,
    escape_swift_string,
    map_element_type,
    swipe_direction,
)

__all__ = [
    "SynthesisOptions",
    "XCUITestSynthesizer",
    "escape_swift_string",
    "map_element_type",
    "swipe_direction",
]
