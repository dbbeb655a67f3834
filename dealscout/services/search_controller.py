# dealscout/services/search_controller.py

"""Cancellable, supersedable searches for interactive front ends."""

import asyncio
import logging

from dealscout.models.platform_result import SearchResponse
from dealscout.services.search_orchestrator import SearchOrchestrator

logger = logging.getLogger("dealscout.controller")


class SearchController:
    """Runs at most one search at a time on behalf of a user session.

    Starting a new search or calling :meth:`cancel` cancels the one in
    flight, which aborts its outstanding HTTP requests and kills any
    isolated browser workers. A search whose generation is no longer
    current has its result discarded, so a late completion can never
    overwrite a newer search.
    """

    def __init__(self, orchestrator: SearchOrchestrator | None = None) -> None:
        self.orchestrator = orchestrator or SearchOrchestrator()
        self._task: asyncio.Task[SearchResponse] | None = None
        self._generation = 0

    @property
    def busy(self) -> bool:
        """True while a search is in flight."""
        return self._task is not None and not self._task.done()

    def cancel(self) -> bool:
        """Cancel the in-flight search; returns whether there was one."""
        self._generation += 1
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        logger.info("Search cancelled by caller")
        return True

    async def run(
        self,
        query: str,
        platforms: list[str] | None = None,
        max_results: int | None = None,
        quick: bool = False,
    ) -> SearchResponse | None:
        """Run a search, returning ``None`` if it was cancelled or superseded."""
        self.cancel()
        generation = self._generation
        task = asyncio.create_task(
            self.orchestrator.search(
                query,
                platforms=platforms,
                max_results=max_results,
                quick=quick,
            )
        )
        self._task = task
        try:
            response = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Discarding cancelled search for '%s'", query)
                return None
            # The caller itself was cancelled, not just the search
            raise
        finally:
            if self._task is task:
                self._task = None

        if generation != self._generation:
            logger.debug("Discarding stale result for '%s'", query)
            return None
        return response
