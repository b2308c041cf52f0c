"""WebDriverAgent backend.

Talks to a WebDriverAgent (WDA) server running inside the simulator over
its HTTP API. WDA is the only backend that can describe the element
hierarchy, and the first choice for every action.

Session strategy:
- A WDASessionHandle is created lazily on the first action and reused.
- A reachable server that already reports a session id is adopted as is.
- If the server is down and a WebDriverAgent Xcode project can be located,
  ``xcodebuild test`` is started in the background and ``/status`` is polled
  until the server answers.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from ...automation_exceptions import ActionTimeoutError, BackendActionError
from ...coordinates.types import CoordinateSpace
from ...utils.process import run_command, spawn_background
from ..interfaces.backend import BackendContext, Capability, IDiscoveryBackend, Point
from ..interfaces.keys import Key, Modifier

logger = logging.getLogger(__name__)

DEFAULT_WDA_PORT = 8100

# Special keys WDA can send as characters through /wda/keys
WDA_KEY_VALUES: dict[Key, str] = {
    Key.RETURN: "\n",
    Key.TAB: "\t",
    Key.DELETE: "\b",
    Key.SPACE: " ",
}


@dataclass
class WDASessionHandle:
    """A live WebDriverAgent session owned by one WDABackend."""

    session_id: str
    port: int
    bundle_id: str | None = None


class WDABackend(IDiscoveryBackend):
    """WebDriverAgent HTTP client implementing every capability."""

    name = "wda"
    coordinate_space = CoordinateSpace.DEVICE_NATIVE
    capabilities = frozenset(Capability)

    def __init__(
        self,
        host: str = "localhost",
        port: int = DEFAULT_WDA_PORT,
        project_paths: list[Path] | None = None,
        status_timeout: float = 2.0,
        request_timeout: float = 10.0,
        source_timeout: float = 30.0,
        startup_attempts: int = 30,
        startup_interval: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            host: Host of the WDA server
            port: Port of the WDA server
            project_paths: Candidate locations of WebDriverAgent.xcodeproj
            status_timeout: Timeout for ``/status``
            request_timeout: Timeout for action requests
            source_timeout: Timeout for ``/source``
            startup_attempts: Number of status polls after starting the server
            startup_interval: Delay between status polls
            transport: Custom httpx transport (used in tests)
        """
        self.host = host
        self.port = port
        self.project_paths = project_paths or []
        self.status_timeout = status_timeout
        self.request_timeout = request_timeout
        self.source_timeout = source_timeout
        self.startup_attempts = startup_attempts
        self.startup_interval = startup_interval
        self._transport = transport
        self._session: WDASessionHandle | None = None
        self._server_process: asyncio.subprocess.Process | None = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def session(self) -> WDASessionHandle | None:
        """The current session handle, if one was established."""
        return self._session

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # Server lifecycle
    # ------------------------------------------------------------------

    async def get_status(self) -> dict[str, Any] | None:
        """Fetch ``/status``.

        Returns:
            Parsed status body, or None if the server does not answer
        """
        try:
            async with self._client(self.status_timeout) as client:
                resp = await client.get("/status")
        except httpx.HTTPError as e:
            logger.debug(f"WDA status check failed: {e}")
            return None
        if resp.status_code != 200:
            return None
        try:
            return resp.json()
        except ValueError:
            return {}

    async def is_running(self) -> bool:
        """Check whether the WDA server answers ``/status``."""
        return await self.get_status() is not None

    async def find_project(self) -> Path | None:
        """Locate WebDriverAgent.xcodeproj.

        Checks the configured candidate paths first, then asks Spotlight.

        Returns:
            Path to the project, or None if it is not installed
        """
        for path in self.project_paths:
            if path.exists():
                return path

        result = await run_command("mdfind", ["-name", "WebDriverAgent.xcodeproj"], timeout=10.0)
        if result.ok and result.stdout:
            return Path(result.stdout.splitlines()[0].strip())
        return None

    async def start(self, udid: str) -> bool:
        """Build and launch WDA on the simulator, then wait for it.

        Args:
            udid: Target simulator

        Returns:
            True once ``/status`` answers, False if the project is missing
            or the server never came up
        """
        project = await self.find_project()
        if project is None:
            logger.info("WebDriverAgent project not found; cannot start WDA")
            return False

        logger.info(f"Starting WebDriverAgent from {project} on port {self.port}")
        self._server_process = await spawn_background(
            "xcodebuild",
            [
                "-project",
                str(project),
                "-scheme",
                "WebDriverAgentRunner",
                "-destination",
                f"platform=iOS Simulator,id={udid}",
                f"USE_PORT={self.port}",
                "test",
            ],
        )
        if self._server_process is None:
            return False

        for _ in range(self.startup_attempts):
            await asyncio.sleep(self.startup_interval)
            if await self.is_running():
                logger.info("WebDriverAgent is up")
                return True

        logger.warning(
            f"WebDriverAgent did not respond after {self.startup_attempts} attempts"
        )
        return False

    async def stop(self) -> None:
        """Terminate a server started by this backend and drop the session."""
        self._session = None
        proc = self._server_process
        self._server_process = None
        if proc is not None and proc.returncode is None:
            proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout=3)
            except asyncio.TimeoutError:
                proc.kill()

    async def probe(self, context: BackendContext, start_if_needed: bool = False) -> bool:
        if await self.is_running():
            return True
        if start_if_needed and context.udid:
            return await self.start(context.udid)
        return False

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------

    async def ensure_session(self, bundle_id: str | None = None) -> WDASessionHandle:
        """Return the current session, creating one if needed.

        Args:
            bundle_id: App to bind a new session to

        Raises:
            BackendActionError: If no session could be established
        """
        if self._session is not None and (
            bundle_id is None or self._session.bundle_id == bundle_id
        ):
            return self._session

        if bundle_id is None:
            status = await self.get_status()
            existing = (status or {}).get("sessionId")
            if existing:
                self._session = WDASessionHandle(session_id=existing, port=self.port)
                return self._session

        capabilities: dict[str, Any] = {"arguments": [], "environment": {}}
        if bundle_id:
            capabilities["bundleId"] = bundle_id
        body = await self._request(
            "session", "POST", "/session", {"capabilities": capabilities}, self.request_timeout
        )
        session_id = body.get("sessionId") or (body.get("value") or {}).get("sessionId")
        if not session_id:
            raise BackendActionError(self.name, "session", "Failed to create WDA session")

        self._session = WDASessionHandle(session_id=session_id, port=self.port, bundle_id=bundle_id)
        logger.debug(f"Created WDA session {session_id}")
        return self._session

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None,
        timeout: float,
    ) -> dict[str, Any]:
        try:
            async with self._client(timeout) as client:
                resp = await client.request(method, path, json=payload)
        except httpx.TimeoutException as e:
            raise ActionTimeoutError(operation, timeout, backend=self.name) from e
        except httpx.HTTPError as e:
            raise BackendActionError(self.name, operation, str(e)) from e

        if not resp.is_success:
            raise BackendActionError(
                self.name, operation, f"HTTP {resp.status_code}", status_code=resp.status_code
            )
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {"value": data}

    async def _session_post(
        self,
        operation: str,
        endpoint: str,
        payload: dict[str, Any],
        context: BackendContext,
        timeout: float | None = None,
    ) -> None:
        session = await self.ensure_session(context.bundle_id)
        await self._request(
            operation,
            "POST",
            f"/session/{session.session_id}{endpoint}",
            payload,
            timeout or self.request_timeout,
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def tap(self, point: Point, context: BackendContext) -> None:
        await self._session_post("tap", "/wda/tap/0", {"x": point.x, "y": point.y}, context)

    async def type_text(self, text: str, context: BackendContext) -> None:
        await self._session_post("type", "/wda/keys", {"value": list(text)}, context)

    async def swipe(
        self, start: Point, end: Point, duration_ms: int, context: BackendContext
    ) -> None:
        await self._session_post(
            "swipe",
            "/wda/dragfromtoforduration",
            {
                "fromX": start.x,
                "fromY": start.y,
                "toX": end.x,
                "toY": end.y,
                "duration": duration_ms / 1000,
            },
            context,
        )

    async def long_press(self, point: Point, duration_ms: int, context: BackendContext) -> None:
        await self._session_post(
            "long_press",
            "/wda/touchAndHold",
            {"x": point.x, "y": point.y, "duration": duration_ms / 1000},
            context,
            timeout=self.request_timeout + duration_ms / 1000,
        )

    async def double_tap(self, point: Point, context: BackendContext) -> None:
        await self._session_post(
            "double_tap", "/wda/doubleTap", {"x": point.x, "y": point.y}, context
        )

    async def press_key(
        self, key: Key | str, modifiers: tuple[Modifier, ...], context: BackendContext
    ) -> None:
        if modifiers:
            raise BackendActionError(self.name, "key", "modifier keys not supported")
        if isinstance(key, Key):
            if key not in WDA_KEY_VALUES:
                raise BackendActionError(self.name, "key", f"'{key.value}' not supported")
            value = WDA_KEY_VALUES[key]
        else:
            value = key
        await self._session_post("key", "/wda/keys", {"value": [value]}, context)

    async def get_source(self, context: BackendContext) -> dict[str, Any] | None:
        path = f"/session/{self._session.session_id}/source" if self._session else "/source"
        try:
            async with self._client(self.source_timeout) as client:
                resp = await client.get(path, params={"format": "json"})
        except httpx.HTTPError as e:
            logger.warning(f"WDA source request failed: {e}")
            return None
        if not resp.is_success:
            logger.warning(f"WDA source request returned HTTP {resp.status_code}")
            return None
        try:
            value = resp.json().get("value")
        except (ValueError, AttributeError):
            return None
        return value if isinstance(value, dict) else None
