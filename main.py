import asyncio
import functools
import logging
import sys

from core import config
from core.models import Article
from core.monitoring import HealthMonitor
from core.playback import PlaybackStateMachine
from core.service import ArticleServiceClient
from core.session import SessionController
from core.state import LoadPhase, RequestPhase
from core.utils import (
    comment_author_initial,
    comment_author_name,
    image_or_placeholder,
    truncate_text,
)
from speech.base import SpeechOptions
from speech.edge_device import EdgeTTSDevice

log = logging.getLogger("smartreader")


HELP = """Commands:
  list                 show all articles
  search <term>        filter by title or category
  open <id>            open an article
  back                 return to the list
  summary              show / hide the AI summary
  read                 read aloud (stop if already reading)
  pause                pause / resume reading
  stop                 stop reading
  draft <text>         set the comment draft
  comment [text]       post the draft (or the given text)
  retry                reload the article list
  status               connection and failure counters
  quit"""


def parse_article_id(raw: str):
    raw = raw.strip()
    return int(raw) if raw.isdigit() else raw


def render_list(articles: list[Article]) -> None:
    if not articles:
        print("  (no articles)")
    for a in articles:
        print(f"  [{a.id}] {a.title}  <{a.category}>  by {a.author}")


def render_detail(session: SessionController) -> None:
    article = session.current_article
    if article is None:
        return
    print(f"\n== {article.title} ==  <{article.category}>  by {article.author}")
    print(f"image: {image_or_placeholder(article.image)}")
    if session.summary_visible:
        print("-- AI summary --")
        if session.summary_request.phase is RequestPhase.FAILED:
            print(f"  ! {session.summary_request.reason}")
        else:
            print(f"  {article.summary or 'No summary available for this article yet.'}")
    print(article.content)
    print(f"\nComments ({len(article.comments)}):")
    for c in article.comments:
        print(f"  ({comment_author_initial(c)}) {comment_author_name(c)}: {c.text}  [{c.sentiment.value}]")
    if session.comment_error:
        print(f"  ! {session.comment_error}")
    if session.draft:
        print(f"  draft: {truncate_text(session.draft, 60)}")


def command_done(pending: set, task: asyncio.Task) -> None:
    pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.error("Command failed: %s", exc, exc_info=exc)


def render_status(session: SessionController) -> None:
    status = session.load_status
    line = f"server: {session.connection_status()}"
    if status.phase is LoadPhase.FAILED:
        line += f" ({status.reason})"
    print(line)
    print(f"playback: {session.playback_state.value}")
    failures = session.monitor.get_status()
    if failures:
        print("failures: " + ", ".join(f"{k}={v}" for k, v in failures.items()))


async def dispatch(session: SessionController, line: str) -> None:
    cmd, _, arg = line.strip().partition(" ")
    cmd = cmd.lower()

    if cmd == "help" or not cmd:
        print(HELP)
    elif cmd == "list":
        render_list(session.search(""))
    elif cmd == "search":
        render_list(session.search(arg))
    elif cmd == "open":
        if session.open_article(parse_article_id(arg)):
            render_detail(session)
        else:
            print("No such article.")
    elif cmd == "back":
        session.close_article()
        render_list(session.search(""))
    elif cmd == "summary":
        await session.toggle_summary()
        render_detail(session)
    elif cmd == "read":
        session.toggle_playback()
    elif cmd == "pause":
        session.toggle_pause()
    elif cmd == "stop":
        session.stop_playback()
    elif cmd == "draft":
        session.set_draft(arg)
    elif cmd == "comment":
        ok = await session.submit_comment(arg if arg else None)
        if ok:
            render_detail(session)
        elif session.comment_error:
            print(f"! {session.comment_error}")
    elif cmd == "retry":
        await session.fetch_catalog()
        render_status(session)
    elif cmd == "status":
        render_status(session)
    else:
        print(f"Unknown command: {cmd}. Type 'help'.")


async def run() -> None:
    config.validate_config()

    monitor = HealthMonitor(alert_threshold=config.FAILURE_ALERT_THRESHOLD)
    client = ArticleServiceClient(config.API_BASE_URL, timeout=config.HTTP_TIMEOUT)
    device = EdgeTTSDevice(default_voice=config.DEFAULT_VOICE)
    playback = PlaybackStateMachine(
        device,
        SpeechOptions(language=config.SPEECH_LANGUAGE, rate=config.SPEECH_RATE),
        monitor=monitor,
        on_change=lambda state: print(f"[playback: {state.value}]"),
    )
    session = SessionController(client, playback, monitor=monitor,
                                comment_user_id=config.COMMENT_USER_ID)

    await playback.load_voices(preferred=config.SPEECH_VOICE, default=config.DEFAULT_VOICE)

    print(f"Connecting to {config.API_BASE_URL} ...")
    await session.fetch_catalog()
    render_status(session)
    if session.load_status.phase is LoadPhase.READY:
        render_list(session.search(""))
    print(HELP)

    # Commands run as tasks so a pending request never blocks the next command.
    loop = asyncio.get_running_loop()
    pending: set = set()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line or line.strip().lower() in ("quit", "exit"):
                break
            task = asyncio.create_task(dispatch(session, line))
            pending.add(task)
            task.add_done_callback(functools.partial(command_done, pending))
    finally:
        for task in list(pending):
            task.cancel()
        await session.shutdown()


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        log.info("Interrupted.")


if __name__ == "__main__":
    main()
