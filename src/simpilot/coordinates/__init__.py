"""Coordinate system abstractions for simulator automation.

## Coordinate Systems

1. **DevicePoint** - Pixel coordinates on the simulated screen
   - What WebDriverAgent, idb and AXe accept
   - What element rectangles from the element tree use

2. **HostPoint** - Absolute coordinates on the host display
   - What cliclick and AppleScript clicks use
   - Device point + window origin + title bar offset

## Usage

```python
from simpilot.coordinates import CoordinateTranslator, SimulatorWindowLocator

translator = CoordinateTranslator(SimulatorWindowLocator())
host_point = await translator.translate(DevicePoint(10, 10), CoordinateSpace.HOST_ABSOLUTE)
```
"""

from .service import CoordinateTranslator, device_to_host
from .types import CoordinateSpace, DevicePoint, HostPoint, WindowBounds
from .window import SimulatorWindowLocator

__all__ = [
    "CoordinateSpace",
    "CoordinateTranslator",
    "DevicePoint",
    "HostPoint",
    "SimulatorWindowLocator",
    "WindowBounds",
    "device_to_host",
]
