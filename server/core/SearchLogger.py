"""Best-effort persistence of search query telemetry."""

import asyncio

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.knowledge import SearchQueryLog


class SearchLogger:
    """Writes SearchQueryLog records without ever affecting the caller's result.

    With detached=True the write is scheduled as a background task and
    do_log() returns immediately; otherwise it is awaited and its outcome
    ignored. Failures only ever surface as warnings.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        enabled: bool | None = None,
        detached: bool | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag = rag_client
        self.enabled = enabled if enabled is not None else helper_config.get_bool_val("SEARCH_LOG_ENABLED", default=True)
        self.detached = detached if detached is not None else helper_config.get_bool_val("SEARCH_LOG_DETACHED", default=False)
        self._pending: set[asyncio.Task] = set()

    async def do_log(self, record: SearchQueryLog) -> None:
        """Persist a record, best-effort.

        Args:
            record (SearchQueryLog): The record to write.
        """
        if not self.enabled:
            return
        if self.detached:
            task = asyncio.create_task(self._write(record))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return
        await self._write(record)

    async def _write(self, record: SearchQueryLog) -> None:
        try:
            await self._rag.do_log_search(record)
        except Exception as e:
            self.logging.warning("Failed to log search query %r: %s", record.query[:80], e)

    async def drain(self) -> None:
        """Wait for detached writes still in flight (called on shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
