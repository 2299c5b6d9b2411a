"""
Voice study session state.

Maps the events of an external voice-agent SDK (call start/end, speech,
messages, errors) onto display state, keeps the call timer, and records
progress once a call ends.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from core.config import (
    VAPI_ASSISTANT_ID,
    STATUS_MESSAGE_TTL_SECONDS,
    ERROR_MESSAGE_TTL_SECONDS,
    AI_SPEAKING_RESET_SECONDS,
)
from services.progress.progress_tracker import progress_tracker, ProgressTracker

logger = logging.getLogger(__name__)

SDK_EVENTS = ("speech-start", "speech-end", "call-start", "call-end", "message", "error")
SPEAKING_MESSAGE_TYPES = {"conversation", "response"}


class CallState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    ENDING = "ending"
    ENDED = "ended"
    ERROR = "error"


class VoiceClient(Protocol):
    """The subset of the voice-agent SDK a session talks to."""

    def on(self, event: str, handler: Callable[..., None]) -> None: ...

    def start(self, assistant_id: str, overrides: Dict[str, Any]) -> Any: ...

    def stop(self) -> Any: ...

    def remove_all_listeners(self) -> None: ...


@dataclass
class SessionUser:
    """Identity-provider user as seen by the session."""
    id: str
    first_name: Optional[str] = None
    image_url: Optional[str] = None


def format_duration(seconds: int) -> str:
    """Format seconds as MM:SS."""
    mins, secs = divmod(max(int(seconds), 0), 60)
    return f"{mins:02d}:{secs:02d}"


def build_assistant_overrides(first_name: str, topic: Dict[str, Any]) -> Dict[str, Any]:
    """Variables handed to the voice assistant when a call starts."""
    return {
        "variableValues": {
            "name": first_name,
            "topic": topic.get("title"),
            "subject": topic.get("subject"),
            "class": topic.get("class_name"),
        }
    }


class CallTimer:
    """Counts whole seconds while a call is active."""

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self.seconds = 0
        self.running = False

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def tick(self) -> int:
        if self.running:
            self.seconds += 1
        return self.seconds

    def reset(self) -> None:
        self.seconds = 0

    async def run(self) -> None:
        """Tick once per interval until stopped."""
        while self.running:
            await asyncio.sleep(self.interval)
            self.tick()

    @property
    def display(self) -> str:
        return format_duration(self.seconds)


class VoiceSession:
    """Display state for one study call on one topic."""

    def __init__(
        self,
        voice_client: VoiceClient,
        topic_id: str,
        user: Optional[SessionUser],
        topic: Optional[Dict[str, Any]] = None,
        tracker: Optional[ProgressTracker] = None,
        assistant_id: Optional[str] = VAPI_ASSISTANT_ID,
        timer: Optional[CallTimer] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = voice_client
        self.topic_id = topic_id
        self.user = user
        self.topic = topic
        self.tracker = tracker or progress_tracker
        self.assistant_id = assistant_id
        self.timer = timer or CallTimer()
        self.clock = clock

        self.state = CallState.IDLE
        self.is_recording = False
        self.is_muted = False
        self._status_text = ""
        self._status_expires_at: Optional[float] = None
        self._ai_speaking_until: Optional[float] = None
        self._timer_task: Optional[asyncio.Task] = None

        handlers = {
            "speech-start": self._on_speech_start,
            "speech-end": self._on_speech_end,
            "call-start": self._on_call_start,
            "call-end": self._on_call_end,
            "message": self._on_message,
            "error": self._on_error,
        }
        for event in SDK_EVENTS:
            self.client.on(event, handlers[event])

    # ------------------------------------------------------------------
    # Status messages
    # ------------------------------------------------------------------

    def _set_status(self, text: str, ttl: Optional[float] = None) -> None:
        self._status_text = text
        self._status_expires_at = self.clock() + ttl if ttl is not None else None

    def current_status(self) -> str:
        """The status line, or "" once a transient message has expired."""
        if self._status_expires_at is not None and self.clock() >= self._status_expires_at:
            self._status_text = ""
            self._status_expires_at = None
        return self._status_text

    @property
    def is_call_active(self) -> bool:
        return self.state == CallState.ACTIVE

    @property
    def is_loading(self) -> bool:
        return self.state == CallState.STARTING

    @property
    def is_ai_speaking(self) -> bool:
        return self._ai_speaking_until is not None and self.clock() < self._ai_speaking_until

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def toggle(self) -> None:
        if self.is_call_active:
            self.stop()
        else:
            self.start()

    def start(self) -> bool:
        """Start a call with topic context. Returns False if the call could not start."""
        if not self.topic:
            self._set_status("Topic data not available", STATUS_MESSAGE_TTL_SECONDS)
            return False

        if not self.user or not self.user.first_name:
            self._set_status("User information not available", STATUS_MESSAGE_TTL_SECONDS)
            return False

        self.state = CallState.STARTING
        self._set_status("Starting call...")
        overrides = build_assistant_overrides(self.user.first_name, self.topic)

        try:
            if not self.assistant_id:
                raise RuntimeError("VAPI_ASSISTANT_ID is not configured")
            self.client.start(self.assistant_id, overrides)
        except Exception as e:
            logger.error(f"Failed to start voice call: {e}")
            self.state = CallState.ERROR
            self._set_status(f"Failed to start call: {e}", ERROR_MESSAGE_TTL_SECONDS)
            return False

        return True

    def stop(self) -> None:
        try:
            self.client.stop()
            self.state = CallState.ENDING
            self._set_status("Ending call...")
        except Exception as e:
            logger.error(f"Failed to end voice call: {e}")
            self._set_status("Failed to end call", STATUS_MESSAGE_TTL_SECONDS)

    def toggle_mute(self) -> bool:
        self.is_muted = not self.is_muted
        return self.is_muted

    def close(self) -> None:
        """Teardown: end an active call and drop SDK listeners."""
        if self.is_call_active:
            try:
                self.client.stop()
            except Exception as e:
                logger.error(f"Failed to end call on teardown: {e}")
        self._stop_timer()
        self.client.remove_all_listeners()

    # ------------------------------------------------------------------
    # SDK events
    # ------------------------------------------------------------------

    def _on_speech_start(self, *args) -> None:
        self.is_recording = True

    def _on_speech_end(self, *args) -> None:
        self.is_recording = False

    def _on_call_start(self, *args) -> None:
        self.state = CallState.ACTIVE
        self._set_status("Call connected")
        self.timer.reset()
        self.timer.start()
        self._start_timer_task()

    def _on_call_end(self, *args) -> None:
        duration = self.timer.seconds
        self._stop_timer()
        self.timer.reset()

        self.state = CallState.ENDED
        self._ai_speaking_until = None
        self._set_status("Call ended", STATUS_MESSAGE_TTL_SECONDS)

        try:
            self.tracker.update_progress(self.topic_id, self.user.id if self.user else None, duration)
        except Exception as e:
            logger.error(f"Error updating progress after call end: {e}")

    def _on_message(self, message: Any = None, *args) -> None:
        message_type = message.get("type") if isinstance(message, dict) else getattr(message, "type", None)
        if message_type in SPEAKING_MESSAGE_TYPES:
            self._ai_speaking_until = self.clock() + AI_SPEAKING_RESET_SECONDS

    def _on_error(self, error: Any = None, *args) -> None:
        if isinstance(error, dict):
            detail = error.get("message")
        else:
            detail = getattr(error, "message", None) or (str(error) if error else None)
        logger.error(f"Voice SDK error: {error}")

        self.state = CallState.ERROR
        self._stop_timer()
        self._set_status(f"Call error: {detail or 'Unknown error'}", ERROR_MESSAGE_TTL_SECONDS)

    # ------------------------------------------------------------------
    # Timer task
    # ------------------------------------------------------------------

    def _start_timer_task(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: the caller drives timer.tick() itself
            return
        self._timer_task = loop.create_task(self.timer.run())

    def _stop_timer(self) -> None:
        self.timer.stop()
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "topic_id": self.topic_id,
            "state": self.state.value,
            "status": self.current_status(),
            "duration": self.timer.display,
            "is_recording": self.is_recording,
            "is_ai_speaking": self.is_ai_speaking,
            "is_muted": self.is_muted,
        }
