"""Per-conversation state passed explicitly into each pipeline stage."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import uuid
from typing import Optional

from emr_copilot.cache.memory import ResultCache
from emr_copilot.cache.protocols import IResultCache
from emr_copilot.models import InsertionPayload, PageMetadata

log = logging.getLogger(__name__)


@dataclasses.dataclass
class SessionContext:
    """Corpus, last result, metadata and fee-slip cache of one conversation.

    ``lock`` serializes pipeline runs so one turn finishes before the next
    starts.
    """

    session_id: str = dataclasses.field(default_factory=lambda: uuid.uuid4().hex)
    cache: IResultCache = dataclasses.field(default_factory=ResultCache)
    last_extracted_text: str = ""
    last_generated_result: Optional[InsertionPayload] = None
    current_metadata: PageMetadata = dataclasses.field(default_factory=PageMetadata)
    lock: asyncio.Lock = dataclasses.field(default_factory=asyncio.Lock, repr=False)

    async def reset(self) -> None:
        """Start a new topic: forget text, result, metadata and cached fee slips."""
        self.last_extracted_text = ""
        self.last_generated_result = None
        self.current_metadata = PageMetadata()
        await self.cache.clear()
        log.info("Session %s reset", self.session_id)
