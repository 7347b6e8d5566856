"""Session controller: the single authority over the reading session.

The presentation layer calls the operations below and renders the public
attributes; it never touches the catalog, the service client or the speech
device directly. Every network completion is checked against the visit it
was issued for before it changes anything the user sees.
"""

import logging
from typing import Hashable, List, Optional

from core.catalog import CatalogStore
from core.config import COMMENT_USER_ID, FAILURE_ALERT_THRESHOLD
from core.models import Article
from core.monitoring import HealthMonitor
from core.playback import PlaybackState, PlaybackStateMachine
from core.service import ArticleServiceClient, ServiceError
from core.state import LoadPhase, LoadStatus, RequestPhase, SubmissionPhase, SummaryRequest

log = logging.getLogger("smartreader.session")


class SessionController:
    def __init__(self, client: ArticleServiceClient, playback: PlaybackStateMachine,
                 catalog: Optional[CatalogStore] = None,
                 monitor: Optional[HealthMonitor] = None,
                 comment_user_id: Hashable = COMMENT_USER_ID):
        self.client = client
        self.playback = playback
        self.catalog = catalog if catalog is not None else CatalogStore()
        self.monitor = monitor if monitor is not None else HealthMonitor(FAILURE_ALERT_THRESHOLD)
        self.comment_user_id = comment_user_id

        self.load_status = LoadStatus.loading()
        self.open_article_id: Optional[Hashable] = None
        self.summary_visible = False
        self.summary_request = SummaryRequest.idle()
        self.comment_submission = SubmissionPhase.IDLE
        self.comment_error: Optional[str] = None
        self.draft = ""

        # Bumped on every open/close; a completion from an older visit is stale.
        self._visit = 0

    # ── derived views ─────────────────────────────────────────

    @property
    def current_article(self) -> Optional[Article]:
        if self.open_article_id is None:
            return None
        return self.catalog.get(self.open_article_id)

    @property
    def playback_state(self) -> PlaybackState:
        return self.playback.state

    def search(self, term: str) -> List[Article]:
        articles = self.catalog.all()
        if not term:
            return articles
        return [a for a in articles if term in a.title or term in a.category]

    def connection_status(self) -> str:
        phase = self.load_status.phase
        if phase is LoadPhase.LOADING:
            return "connecting"
        if phase is LoadPhase.FAILED:
            return "error"
        return "connected"

    def _is_current(self, article_id: Hashable, visit: int) -> bool:
        return self._visit == visit and self.open_article_id == article_id

    # ── catalog ───────────────────────────────────────────────

    async def fetch_catalog(self) -> None:
        self.load_status = LoadStatus.loading()
        try:
            articles = await self.client.fetch_articles()
        except ServiceError as e:
            log.warning("Catalog fetch failed: %s", e.reason)
            self.monitor.record_failure("catalog", e.reason)
            self.load_status = LoadStatus.failed(e.reason)
            return

        self.catalog.load_all(articles)
        self.load_status = LoadStatus.ready()
        self.monitor.record_success("catalog")
        log.info("Catalog loaded: %d article(s).", len(self.catalog))

        if self.open_article_id is not None and self.open_article_id not in self.catalog:
            log.info("Open article %r no longer in catalog, closing it.", self.open_article_id)
            self.close_article()

    # ── navigation ────────────────────────────────────────────

    def open_article(self, article_id: Hashable) -> bool:
        if article_id not in self.catalog:
            log.warning("Cannot open unknown article %r.", article_id)
            return False
        self.playback.stop()
        self._visit += 1
        self.open_article_id = article_id
        self._reset_detail_view()
        log.debug("Opened article %r.", article_id)
        return True

    def close_article(self) -> None:
        self.playback.stop()
        self._visit += 1
        self.open_article_id = None
        self._reset_detail_view()

    def _reset_detail_view(self) -> None:
        self.summary_visible = False
        self.summary_request = SummaryRequest.idle()
        self.comment_error = None
        self.draft = ""

    # ── summary ───────────────────────────────────────────────

    async def toggle_summary(self) -> None:
        if self.summary_visible:
            self.summary_visible = False
            return

        article = self.current_article
        if article is None:
            return
        if self.summary_request.phase is RequestPhase.IN_FLIGHT:
            return

        # Fetched at most once per article per session.
        if article.summary:
            self.summary_request = SummaryRequest.idle()
            self.summary_visible = True
            return

        article_id, visit = article.id, self._visit
        self.summary_request = SummaryRequest.in_flight()
        try:
            summary = await self.client.fetch_summary(article_id)
        except ServiceError as e:
            log.warning("Summary fetch failed for %r: %s", article_id, e.reason)
            self.monitor.record_failure("summary", e.reason)
            if self._is_current(article_id, visit):
                self.summary_request = SummaryRequest.failed(e.reason)
                self.summary_visible = True
            return

        self.monitor.record_success("summary")
        self.catalog.update(article_id, {"summary": summary})
        if self._is_current(article_id, visit):
            self.summary_visible = True
            self.summary_request = SummaryRequest.idle()
        else:
            log.debug("Summary for %r cached after navigation.", article_id)

    # ── comments ──────────────────────────────────────────────

    def set_draft(self, text: str) -> None:
        self.draft = text or ""

    async def submit_comment(self, text: Optional[str] = None) -> bool:
        text = self.draft if text is None else text
        if not text.strip() or self.current_article is None:
            return False
        if self.comment_submission is SubmissionPhase.IN_FLIGHT:
            return False

        self.draft = text
        article_id, visit = self.open_article_id, self._visit
        self.comment_submission = SubmissionPhase.IN_FLIGHT
        self.comment_error = None
        try:
            comment = await self.client.post_comment(article_id, text, self.comment_user_id)
        except ServiceError as e:
            log.warning("Comment submission failed for %r: %s", article_id, e.reason)
            self.monitor.record_failure("comment", e.reason)
            if self._is_current(article_id, visit):
                self.comment_error = e.reason
            return False
        finally:
            self.comment_submission = SubmissionPhase.IDLE

        self.monitor.record_success("comment")
        current = self.catalog.get(article_id)
        if current is not None:
            self.catalog.update(article_id, {"comments": current.comments + (comment,)})
        # keep whatever was typed while the post was in flight
        if self._is_current(article_id, visit) and self.draft == text:
            self.draft = ""
        log.info("Comment %r posted on %r (%s).", comment.id, article_id, comment.sentiment.value)
        return True

    # ── playback ──────────────────────────────────────────────

    def reading_text(self) -> str:
        """The visible summary when one is shown, else the article body."""
        article = self.current_article
        if article is None:
            return ""
        if self.summary_visible and article.summary:
            return article.summary
        return article.content

    def start_playback(self) -> bool:
        if self.current_article is None:
            return False
        return self.playback.start(self.reading_text())

    def toggle_playback(self) -> bool:
        if self.playback.is_active:
            self.playback.stop()
            return False
        return self.start_playback()

    def toggle_pause(self) -> None:
        self.playback.toggle_pause()

    def stop_playback(self) -> None:
        self.playback.stop()

    async def shutdown(self) -> None:
        self.playback.stop()
        await self.client.close()
