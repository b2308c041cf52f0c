"""Recording of successful actions into an AutomationSession."""

import time

from ..logging import get_logger
from .types import AutomationSession, RecordedAction

logger = get_logger(__name__)


class SessionRecorder:
    """Holds at most one active recording.

    Starting a new recording silently replaces an unfinished one, and
    recording while nothing is active is a no-op. The dispatcher is the only
    caller of ``record`` and calls it only after an action succeeded.

    Example:
        >>> recorder = SessionRecorder()
        >>> recorder.start("com.example.app")
        >>> recorder.record(RecordedAction(kind=ActionKind.WAIT, duration_ms=500))
        >>> session = recorder.stop()
    """

    def __init__(self) -> None:
        self._active: AutomationSession | None = None

    @property
    def active(self) -> AutomationSession | None:
        """The active session, if recording."""
        return self._active

    @property
    def is_recording(self) -> bool:
        return self._active is not None

    def start(self, bundle_id: str | None = None) -> AutomationSession:
        """Begin a new recording, discarding any unfinished one."""
        if self._active is not None:
            logger.debug(
                "recording_replaced", discarded_actions=len(self._active.recorded_actions)
            )
        self._active = AutomationSession(bundle_id=bundle_id)
        logger.info("recording_started", bundle_id=bundle_id)
        return self._active

    def stop(self) -> AutomationSession | None:
        """Finish the active recording.

        Returns:
            The finished session, or None if nothing was recording
        """
        session = self._active
        if session is None:
            return None
        session.end_time = time.time()
        self._active = None
        logger.info(
            "recording_stopped",
            actions=len(session.recorded_actions),
            duration=round(session.duration, 3),
        )
        return session

    def record(self, action: RecordedAction) -> bool:
        """Append an action to the active session.

        Returns:
            True if the action was recorded, False if nothing is recording
        """
        if self._active is None:
            return False
        self._active.recorded_actions.append(action)
        return True

    def add_screenshot(self, path: str) -> bool:
        """Remember a screenshot path on the active session."""
        if self._active is None:
            return False
        self._active.screenshots.append(path)
        return True
