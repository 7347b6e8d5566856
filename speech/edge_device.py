import asyncio
import logging
import os
import tempfile
from typing import List, Optional

import edge_tts
import pygame

from core.utils import rate_to_edge_tts
from speech.base import EndCallback, ErrorCallback, SpeechDevice, SpeechOptions, Voice

log = logging.getLogger("smartreader.speech.edge")


class EdgeTTSDevice(SpeechDevice):
    """
    Neural speech through edge-tts, played back with the pygame mixer.

    Each utterance is synthesized to a temporary mp3, then played while a
    task polls the mixer until the audio ends, so the event loop never blocks.
    """
    name = "edge-tts"

    def __init__(self, default_voice: str, poll_interval: float = 0.1):
        self.default_voice = default_voice
        self.poll_interval = poll_interval
        self._task: Optional[asyncio.Task] = None
        self._paused = False
        self._mixer_ready = False

    def _ensure_mixer(self) -> None:
        if not self._mixer_ready:
            pygame.mixer.init()
            self._mixer_ready = True

    def speak(self, text: str, options: SpeechOptions,
              on_end: EndCallback, on_error: ErrorCallback) -> None:
        self.cancel()
        self._paused = False
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._utterance(text, options, on_end, on_error))

    def pause(self) -> None:
        self._paused = True
        if self._mixer_ready:
            pygame.mixer.music.pause()

    def resume(self) -> None:
        self._paused = False
        if self._mixer_ready:
            pygame.mixer.music.unpause()

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._paused = False
        if self._mixer_ready:
            pygame.mixer.music.stop()

    async def list_voices(self) -> List[Voice]:
        raw = await edge_tts.list_voices()
        return [Voice(name=v["ShortName"], locale=v["Locale"]) for v in raw]

    async def _synthesize(self, text: str, options: SpeechOptions, path: str) -> None:
        communicate = edge_tts.Communicate(
            text,
            options.voice or self.default_voice,
            rate=rate_to_edge_tts(options.rate),
        )
        await communicate.save(path)

    async def _utterance(self, text: str, options: SpeechOptions,
                         on_end: EndCallback, on_error: ErrorCallback) -> None:
        with tempfile.NamedTemporaryFile(suffix=".mp3", delete=False) as f:
            path = f.name
        this_task = asyncio.current_task()
        failure: Optional[Exception] = None
        try:
            await self._synthesize(text, options, path)

            self._ensure_mixer()
            pygame.mixer.music.load(path)
            pygame.mixer.music.play()
            if self._paused:
                pygame.mixer.music.pause()

            # get_busy() is False while paused, so the pause flag keeps us waiting
            while self._paused or pygame.mixer.music.get_busy():
                await asyncio.sleep(self.poll_interval)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.warning("Speech error: %s", e)
            failure = e
        finally:
            if self._mixer_ready and self._task is this_task:
                pygame.mixer.music.unload()
            self._remove_file(path)

        if self._task is this_task:
            self._task = None
        if failure is not None:
            on_error(failure)
        else:
            on_end()

    @staticmethod
    def _remove_file(path: str) -> None:
        try:
            os.remove(path)
        except OSError as e:
            log.debug("Could not remove %s: %s", path, e)
