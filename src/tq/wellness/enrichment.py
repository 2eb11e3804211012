"""
Text-analysis enrichment for journal entries.

The analysis service is optional and best-effort: it runs after the journal
entry has committed, and any failure (disabled, timeout, bad response) is
logged and dropped. It never affects rewards.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from tq.config import get_settings
from tq.database import get_session_factory
from tq.db.models import JournalEntry
from tq.timeutils import utcnow

logger = structlog.get_logger()


class EnrichmentClient:
    """Posts ``{"context": ...}`` to the analysis service and returns its ``analysis`` text."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def analyze(self, context: dict[str, Any]) -> str | None:
        """Return the analysis text, or None when disabled or on any failure."""
        if not self.enabled:
            return None
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(self.url, json={"context": context})
                response.raise_for_status()
                analysis = response.json().get("analysis")
        except (httpx.HTTPError, ValueError):
            logger.warning("enrichment_failed", url=self.url, exc_info=True)
            return None
        if not isinstance(analysis, str) or not analysis.strip():
            logger.warning("enrichment_empty", url=self.url)
            return None
        return analysis


def get_enrichment_client() -> EnrichmentClient:
    settings = get_settings()
    return EnrichmentClient(settings.enrichment_url, settings.enrichment_timeout_seconds)


def journal_context(entry: JournalEntry) -> dict[str, Any]:
    return {
        "entry": {
            "content": entry.content,
            "mood": entry.mood or "not specified",
        },
    }


async def annotate_journal_entry(entry_id: int, client: EnrichmentClient | None = None) -> bool:
    """Attach an analysis to a committed journal entry in its own session.

    Intended for a background task after the request commits. Returns True
    if an analysis was stored.
    """
    client = client or get_enrichment_client()
    if not client.enabled:
        return False

    async with get_session_factory()() as db:
        entry = await db.get(JournalEntry, entry_id)
        if entry is None or entry.deleted_at is not None:
            return False
        analysis = await client.analyze(journal_context(entry))
        if analysis is None:
            return False
        entry.analysis = analysis
        entry.updated_at = utcnow()
        await db.commit()

    logger.info("journal_enriched", entry_id=entry_id)
    return True
