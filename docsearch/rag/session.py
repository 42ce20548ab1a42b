from __future__ import annotations

"""Per-user search sessions holding the most recent result."""

import logging
from dataclasses import dataclass, field

from docsearch.corpus.accessor import CorpusAccessor
from docsearch.rag.orchestrator import SKIP_BLANK_QUERY, QueryOrchestrator
from docsearch.rag.types import SearchOutcome, SearchResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1024


@dataclass
class SearchSession:
    """Run searches for one user and keep the latest successful result.

    The corpus is fetched per run and snapshotted as a tuple, so a cancelled
    run never touches shared collections. ``latest`` is replaced in a single
    assignment after a result is complete; skips, failures and cancellation
    leave the previous result in place. Runs are numbered when they start,
    and when runs overlap a result never replaces one from a later run.
    """
    user_id: str
    corpus: CorpusAccessor
    orchestrator: QueryOrchestrator
    latest: SearchResult | None = None
    _started: int = field(default=0, repr=False)
    _latest_run: int = field(default=0, repr=False)

    async def run(self, query: str) -> SearchOutcome:
        if not query.strip():
            return SearchOutcome(result=None, skipped_reason=SKIP_BLANK_QUERY)
        self._started += 1
        run_number = self._started
        documents = tuple(await self.corpus.fetch_documents(self.user_id))
        outcome = await self.orchestrator.search(query, documents)
        if outcome.result is not None:
            if run_number > self._latest_run:
                self.latest = outcome.result
                self._latest_run = run_number
            else:
                logger.info("search_result_superseded", extra={"run": run_number})
        return outcome


@dataclass
class SessionRegistry:
    """One search session per user identity.

    At most ``max_sessions`` sessions are kept; the least recently used one
    is dropped, together with its latest result, when the limit is exceeded.
    """
    corpus: CorpusAccessor
    orchestrator: QueryOrchestrator
    max_sessions: int = DEFAULT_MAX_SESSIONS
    _sessions: dict[str, SearchSession] = field(default_factory=dict)

    def get(self, user_id: str) -> SearchSession:
        session = self._sessions.pop(user_id, None)
        if session is None:
            session = SearchSession(
                user_id=user_id,
                corpus=self.corpus,
                orchestrator=self.orchestrator,
            )
            logger.debug("search_session_created", extra={"sessions": len(self._sessions) + 1})
        self._sessions[user_id] = session
        while self.max_sessions > 0 and len(self._sessions) > self.max_sessions:
            evicted = next(iter(self._sessions))
            del self._sessions[evicted]
            logger.info("search_session_evicted", extra={"sessions": len(self._sessions)})
        return session

    def latest(self, user_id: str) -> SearchResult | None:
        session = self._sessions.get(user_id)
        return session.latest if session else None
