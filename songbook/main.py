"""songbook - live-ranked song catalog browser."""

import logging
from collections.abc import Callable

from songbook.core.logging import configure_logfire
from songbook.interface.catalog_client import CatalogClient
from songbook.interface.session import BrowserSession
from songbook.services.browser_state import BrowserSnapshot


logger = logging.getLogger(__name__)


async def start_session(
    *,
    client: CatalogClient | None = None,
    scroll_probe: Callable[[], int] | None = None,
    on_render: Callable[[BrowserSnapshot], None] | None = None,
    on_scroll_to_top: Callable[[], None] | None = None,
) -> BrowserSession:
    """Configure observability and start a browsing session against the catalog server."""
    configure_logfire()

    session = BrowserSession(
        client=client or CatalogClient(),
        scroll_probe=scroll_probe,
        on_render=on_render,
        on_scroll_to_top=on_scroll_to_top,
    )
    await session.start()
    logger.info("session_started")
    return session
