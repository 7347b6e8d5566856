import asyncio
import pytest

from core.models import Article, Comment, Sentiment
from core.monitoring import HealthMonitor
from core.playback import PlaybackStateMachine
from core.service import ServiceError
from core.session import SessionController
from speech.base import SpeechDevice, SpeechOptions


def make_article(id=1, **overrides) -> Article:
    defaults = dict(
        id=id,
        title=f"Article {id}",
        category="Science",
        author="Jane Doe",
        image="https://example.com/img.jpg",
        content=f"Body of article {id}.",
    )
    defaults.update(overrides)
    return Article(**defaults)


class FakeClient:
    """Records calls; an op can be held on an event or made to fail."""

    def __init__(self, articles=None):
        self.articles = list(articles or [])
        self.summaries = {}
        self.sentiment = Sentiment.POSITIVE
        self.next_comment_id = 6
        self.calls = []
        self.errors = {}
        self.gates = {}
        self.closed = False

    def hold(self, op: str) -> asyncio.Event:
        """Must be called inside a running loop."""
        gate = asyncio.Event()
        self.gates[op] = gate
        return gate

    async def _wait(self, op: str) -> None:
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        err = self.errors.get(op)
        if err is not None:
            raise err

    async def fetch_articles(self):
        self.calls.append(("articles",))
        await self._wait("articles")
        return list(self.articles)

    async def fetch_summary(self, article_id):
        self.calls.append(("summary", article_id))
        await self._wait("summary")
        return self.summaries.get(article_id, f"summary of {article_id}")

    async def post_comment(self, article_id, text, user_id):
        self.calls.append(("comment", article_id, text, user_id))
        await self._wait("comment")
        self.next_comment_id += 1
        return Comment(id=self.next_comment_id, text=text, sentiment=self.sentiment)

    async def close(self):
        self.closed = True

    def count(self, op: str) -> int:
        return sum(1 for c in self.calls if c[0] == op)


class FakeDevice(SpeechDevice):
    name = "fake"

    def __init__(self, voices=None):
        self.calls = []
        self.voices = voices if voices is not None else []
        self.spoken = []
        self.on_end = None
        self.on_error = None

    def speak(self, text, options, on_end, on_error):
        self.calls.append("speak")
        self.spoken.append(text)
        self.on_end = on_end
        self.on_error = on_error

    def pause(self):
        self.calls.append("pause")

    def resume(self):
        self.calls.append("resume")

    def cancel(self):
        self.calls.append("cancel")

    async def list_voices(self):
        if isinstance(self.voices, Exception):
            raise self.voices
        return self.voices

    def finish(self):
        self.on_end()

    def fail(self, exc: Exception):
        self.on_error(exc)


@pytest.fixture
def articles():
    return [
        make_article(1, title="Deep Sea", category="Science"),
        make_article(2, title="Market Watch", category="Economy"),
        make_article(3, title="Science of Sleep", category="Health"),
    ]


@pytest.fixture
def client(articles):
    return FakeClient(articles)


@pytest.fixture
def device():
    return FakeDevice()


@pytest.fixture
def monitor():
    return HealthMonitor(alert_threshold=3)


@pytest.fixture
def playback(device, monitor):
    return PlaybackStateMachine(device, SpeechOptions(language="ar-SA", rate=0.9), monitor=monitor)


@pytest.fixture
def session(client, playback, monitor):
    """A session whose catalog has already been loaded."""
    s = SessionController(client, playback, monitor=monitor, comment_user_id=1)
    asyncio.run(s.fetch_catalog())
    return s


@pytest.fixture
def service_error():
    return ServiceError("server unreachable", status=503)
