from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

EndCallback = Callable[[], None]
ErrorCallback = Callable[[Exception], None]


@dataclass(frozen=True)
class SpeechOptions:
    language: str
    rate: float = 1.0
    voice: Optional[str] = None


@dataclass(frozen=True)
class Voice:
    name: str
    locale: str


class SpeechDevice(ABC):
    """
    A single shared speech output. At most one utterance is active; callers
    must cancel() before speaking again. Callbacks fire on the event loop.
    """
    name: str

    @abstractmethod
    def speak(self, text: str, options: SpeechOptions,
              on_end: EndCallback, on_error: ErrorCallback) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def cancel(self) -> None:
        """Idempotent; safe when nothing is playing."""

    @abstractmethod
    async def list_voices(self) -> List[Voice]:
        ...


def select_voice(voices: List[Voice], language: str,
                 preferred: str = "", default: str = "") -> str:
    """
    Pick a voice for `language` (a tag such as "ar-SA").

    Order: the preferred voice when the device has it, then an exact locale
    match, then any voice sharing the primary language, then `default`.
    """
    if preferred and any(v.name == preferred for v in voices):
        return preferred

    lang = (language or "").lower()
    for v in voices:
        if v.locale.lower() == lang:
            return v.name

    primary = lang.split("-")[0]
    if primary:
        for v in voices:
            if v.locale.lower().split("-")[0] == primary:
                return v.name

    return default
