"""Tests for coordinate types."""

import pytest

from simpilot.coordinates.types import CoordinateSpace, DevicePoint, HostPoint, WindowBounds


class TestWindowBoundsParse:
    """Test parsing System Events output."""

    def test_parse_valid(self) -> None:
        assert WindowBounds.parse("100,50,400,800") == WindowBounds(100, 50, 400, 800)

    def test_parse_with_whitespace(self) -> None:
        assert WindowBounds.parse(" 10, 20 , 30,40\n") == WindowBounds(10, 20, 30, 40)

    def test_parse_negative_origin(self) -> None:
        """Windows on a secondary display can have negative origins."""
        assert WindowBounds.parse("-1440,0,400,800") == WindowBounds(-1440, 0, 400, 800)

    @pytest.mark.parametrize("text", ["", "1,2,3", "a,b,c,d", "1,2,3,4,5"])
    def test_parse_invalid(self, text: str) -> None:
        assert WindowBounds.parse(text) is None


class TestPoints:
    """Test point value semantics."""

    def test_points_are_immutable(self) -> None:
        point = DevicePoint(1, 2)
        with pytest.raises(AttributeError):
            point.x = 5  # type: ignore[misc]

    def test_device_and_host_points_differ(self) -> None:
        assert DevicePoint(1, 2) != HostPoint(1, 2)

    def test_coordinate_space_values(self) -> None:
        assert CoordinateSpace("device_native") is CoordinateSpace.DEVICE_NATIVE
        assert CoordinateSpace("host_absolute") is CoordinateSpace.HOST_ABSOLUTE
