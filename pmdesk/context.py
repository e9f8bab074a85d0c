"""
Application context.

One ``AppContext`` is created per process (API lifespan or CLI run) and
passed explicitly to whatever needs the backend or the document parser.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pmdesk.config import Settings, get_settings
from pmdesk.extraction import DocumentIngestionService, DocumentParser
from pmdesk.storage import BackendClient, ProjectStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide services sharing one backend connection."""
    settings: Settings
    client: BackendClient
    store: ProjectStore
    parser: DocumentParser
    ingestion: DocumentIngestionService

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        client: Optional[BackendClient] = None,
    ) -> "AppContext":
        """Wire the services; raises ``MissingConfigurationError`` without credentials."""
        settings = settings or get_settings()
        client = client or BackendClient.from_settings(settings)
        store = ProjectStore(client)
        parser = DocumentParser(
            max_upload_bytes=settings.max_upload_bytes,
            max_text_length=settings.max_text_length,
        )
        logger.info("Backend client ready for %s", client.base_url)
        return cls(
            settings=settings,
            client=client,
            store=store,
            parser=parser,
            ingestion=DocumentIngestionService(parser, store),
        )

    async def aclose(self) -> None:
        await self.client.close()
