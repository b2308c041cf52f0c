"""Tests for device brokers and screenshot capture."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from simpilot.device import (
    SimctlDeviceBroker,
    SimctlScreenshotCapture,
    StaticDeviceBroker,
)
from simpilot.device.broker import parse_simctl_devices
from simpilot.utils.process import ProcessResult

SIMCTL_OUTPUT = {
    "devices": {
        "com.apple.CoreSimulator.SimRuntime.iOS-17-0": [
            {"udid": "AAA", "name": "iPhone 15", "state": "Shutdown", "isAvailable": True},
            {"udid": "BBB", "name": "iPhone 15 Pro", "state": "Booted", "isAvailable": True},
        ],
        "com.apple.CoreSimulator.SimRuntime.iOS-16-4": [
            {"udid": "CCC", "name": "iPhone 14", "state": "Booted"},
        ],
    }
}


def ok(stdout: str = "") -> ProcessResult:
    return ProcessResult(stdout=stdout, stderr="", exit_code=0)


class TestParse:
    """Test simctl output parsing."""

    def test_parse(self) -> None:
        devices = parse_simctl_devices(SIMCTL_OUTPUT)

        assert [d.udid for d in devices] == ["AAA", "BBB", "CCC"]
        assert devices[1].is_booted
        assert devices[2].runtime.endswith("iOS-16-4")

    def test_parse_empty(self) -> None:
        assert parse_simctl_devices({}) == []


class TestSimctlBroker:
    """Test active device resolution."""

    @pytest.mark.asyncio
    async def test_first_booted_device(self) -> None:
        with patch(
            "simpilot.device.broker.run_command",
            new=AsyncMock(return_value=ok(json.dumps(SIMCTL_OUTPUT))),
        ):
            assert await SimctlDeviceBroker().get_active_udid() == "BBB"

    @pytest.mark.asyncio
    async def test_simctl_failure(self) -> None:
        failed = ProcessResult(stdout="", stderr="xcrun: error", exit_code=1)
        with patch("simpilot.device.broker.run_command", new=AsyncMock(return_value=failed)):
            assert await SimctlDeviceBroker().get_active_device() is None

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        with patch("simpilot.device.broker.run_command", new=AsyncMock(return_value=ok("{"))):
            assert await SimctlDeviceBroker().list_devices() == []

    @pytest.mark.asyncio
    async def test_static_broker(self) -> None:
        assert await StaticDeviceBroker("XYZ").get_active_udid() == "XYZ"


class TestScreenshot:
    """Test simctl screenshots."""

    @pytest.mark.asyncio
    async def test_capture_to_path(self, tmp_path) -> None:
        target = tmp_path / "shots" / "a.png"
        run = AsyncMock(return_value=ok())
        with patch("simpilot.device.screenshot.run_command", new=run):
            result = await SimctlScreenshotCapture(StaticDeviceBroker("XYZ")).capture(str(target))

        assert result.success
        assert result.path == str(target)
        assert target.parent.is_dir()
        assert run.await_args.args == (
            "xcrun",
            ["simctl", "io", "XYZ", "screenshot", str(target)],
        )

    @pytest.mark.asyncio
    async def test_default_path_in_screenshot_dir(self, tmp_path) -> None:
        with patch("simpilot.device.screenshot.run_command", new=AsyncMock(return_value=ok())):
            capture = SimctlScreenshotCapture(StaticDeviceBroker("XYZ"), screenshot_dir=tmp_path)
            result = await capture.capture()

        assert result.path.startswith(str(tmp_path))
        assert result.path.endswith(".png")

    @pytest.mark.asyncio
    async def test_no_booted_device(self) -> None:
        broker = SimctlDeviceBroker()
        broker.get_active_device = AsyncMock(return_value=None)

        result = await SimctlScreenshotCapture(broker).capture()

        assert not result.success
        assert result.error == "No booted simulator found"

    @pytest.mark.asyncio
    async def test_simctl_error(self, tmp_path) -> None:
        failed = ProcessResult(stdout="", stderr="Invalid device", exit_code=1)
        with patch("simpilot.device.screenshot.run_command", new=AsyncMock(return_value=failed)):
            result = await SimctlScreenshotCapture(StaticDeviceBroker("XYZ")).capture(
                str(tmp_path / "a.png")
            )

        assert not result.success
        assert result.error == "Invalid device"
