"""Read-aloud lifecycle on top of the shared speech device.

The state machine is the only caller of the device. Every utterance gets a
token; device callbacks carrying an older token belong to an utterance that
was cancelled or superseded and are dropped.
"""

import dataclasses
import logging
from enum import Enum
from typing import Callable, Optional

from core.monitoring import HealthMonitor
from core.utils import speech_text
from speech.base import SpeechDevice, SpeechOptions, select_voice

log = logging.getLogger("smartreader.playback")


class PlaybackState(str, Enum):
    IDLE = "IDLE"
    SPEAKING = "SPEAKING"
    PAUSED = "PAUSED"


class PlaybackStateMachine:
    def __init__(self, device: SpeechDevice, options: SpeechOptions,
                 monitor: Optional[HealthMonitor] = None,
                 on_change: Optional[Callable[[PlaybackState], None]] = None):
        self.device = device
        self.options = options
        self.monitor = monitor
        self.on_change = on_change
        self.last_error: Optional[str] = None
        self._state = PlaybackState.IDLE
        self._token = 0

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is not PlaybackState.IDLE

    def _set_state(self, new: PlaybackState) -> None:
        if new is self._state:
            return
        log.debug("Playback %s -> %s", self._state.value, new.value)
        self._state = new
        if self.on_change:
            self.on_change(new)

    async def load_voices(self, preferred: str = "", default: str = "") -> str:
        """Query the device once and pin a voice for the target language."""
        try:
            voices = await self.device.list_voices()
        except Exception as e:
            log.warning("Voice list unavailable (%s), using %s.", e, default or "device default")
            voices = []
        voice = select_voice(voices, self.options.language, preferred=preferred, default=default)
        self.options = dataclasses.replace(self.options, voice=voice or None)
        log.info("Speech voice: %s (%s)", voice or "device default", self.options.language)
        return voice

    def start(self, text: str) -> bool:
        if self._state is not PlaybackState.IDLE:
            log.debug("start ignored in state %s", self._state.value)
            return False
        spoken = speech_text(text)
        if not spoken:
            log.info("Nothing to read aloud.")
            return False

        self._token += 1
        token = self._token
        self.last_error = None
        self.device.cancel()
        self._set_state(PlaybackState.SPEAKING)
        self.device.speak(
            spoken,
            self.options,
            on_end=lambda: self._on_end(token),
            on_error=lambda exc: self._on_error(token, exc),
        )
        return True

    def toggle_pause(self) -> None:
        if self._state is PlaybackState.SPEAKING:
            self.device.pause()
            self._set_state(PlaybackState.PAUSED)
        elif self._state is PlaybackState.PAUSED:
            self.device.resume()
            self._set_state(PlaybackState.SPEAKING)

    def stop(self) -> None:
        if self._state is PlaybackState.IDLE:
            return
        self._token += 1
        self.device.cancel()
        self._set_state(PlaybackState.IDLE)

    def _on_end(self, token: int) -> None:
        if token != self._token:
            return
        if self._state is not PlaybackState.IDLE:
            self._set_state(PlaybackState.IDLE)
            if self.monitor:
                self.monitor.record_success("speech")

    def _on_error(self, token: int, exc: Exception) -> None:
        if token != self._token:
            return
        self.last_error = str(exc) or exc.__class__.__name__
        if self.monitor:
            self.monitor.record_failure("speech", self.last_error)
        self._set_state(PlaybackState.IDLE)
