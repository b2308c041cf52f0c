"""simpilot - multi-backend UI automation for the iOS Simulator.

Taps, types and swipes through the best available backend (WebDriverAgent,
idb, AXe, cliclick, AppleScript), discovers on-screen elements, records
successful actions and compiles recordings into XCUITest source.

Example:
    >>> from simpilot import ActionDispatcher, ElementQuery, initialize_automation
    >>> dispatcher = ActionDispatcher(initialize_automation())
    >>> await dispatcher.find_and_tap(ElementQuery(label="Login"))
"""

__version__ = "0.1.0"

from .automation import AutomationService, FlowStep
from .codegen import SynthesisOptions, XCUITestSynthesizer
from .config import SimpilotSettings, get_settings
from .context import AutomationContext, initialize_automation
from .coordinates import CoordinateSpace, CoordinateTranslator, DevicePoint, HostPoint
from .dispatch import ActionDispatcher, DispatchResult, LogicalAction
from .elements import ElementMatcher, ElementQuery, ElementTreeService, UIElement
from .hal import BackendContext, BackendProbe, Capability, IAutomationBackend
from .recording import ActionKind, AutomationSession, RecordedAction, SessionRecorder

__all__ = [
    "ActionDispatcher",
    "ActionKind",
    "AutomationContext",
    "AutomationService",
    "AutomationSession",
    "BackendContext",
    "BackendProbe",
    "Capability",
    "CoordinateSpace",
    "CoordinateTranslator",
    "DevicePoint",
    "DispatchResult",
    "ElementMatcher",
    "ElementQuery",
    "ElementTreeService",
    "FlowStep",
    "HostPoint",
    "IAutomationBackend",
    "LogicalAction",
    "RecordedAction",
    "SessionRecorder",
    "SimpilotSettings",
    "SynthesisOptions",
    "UIElement",
    "XCUITestSynthesizer",
    "get_settings",
    "initialize_automation",
]
