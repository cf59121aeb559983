import logging
from typing import List, Optional

from shortlink_app.exceptions import InvalidURLError
from shortlink_app.models.link import Link, utc_now
from shortlink_app.queue.dispatcher import ClickDispatcher
from shortlink_app.queue.models import ClickEvent
from shortlink_app.services.allocator import CodeAllocator
from shortlink_app.storage.strategies import LinkStore

logger = logging.getLogger(__name__)

MIN_URL_LENGTH = 10
ALLOWED_SCHEMES = ("http://", "https://")


def validate_url(url: str) -> None:
    """
    Reject URLs that cannot be redirect targets.

    Raises:
        InvalidURLError: If shorter than 10 characters or not http(s)
    """
    if len(url) < MIN_URL_LENGTH or not url.startswith(ALLOWED_SCHEMES):
        raise InvalidURLError(url)


class LinkService:
    """
    Link Service with the store, allocator and click dispatcher injected.

    This follows the Dependency Injection pattern:
    - One store is built at startup and handed to every component
    - Easy to test (inject InMemoryLinkStore)
    """

    def __init__(
        self,
        store: LinkStore,
        allocator: CodeAllocator,
        dispatcher: Optional[ClickDispatcher] = None,
        atomic_create: bool = False,
    ):
        """
        Initialize link service with dependencies.

        Args:
            store: Link store (source of truth for code uniqueness)
            allocator: Short code allocator
            dispatcher: Click dispatcher (optional; without it clicks are not counted)
            atomic_create: Claim codes with store.create_if_absent instead of
                exists-then-save
        """
        self.store = store
        self.allocator = allocator
        self.dispatcher = dispatcher
        self.atomic_create = atomic_create

    async def create_link(self, original_url: str) -> Link:
        """Validate the URL, allocate a fresh code and persist the link.

        Always creates a new code, even for a URL that is already stored.
        """
        validate_url(original_url)

        if self.atomic_create:
            claimed: List[Link] = []

            async def is_taken(code: str) -> bool:
                link = Link(short_code=code, original_url=original_url, created_at=utc_now())
                if await self.store.create_if_absent(link):
                    claimed.append(link)
                    return False
                return True

            await self.allocator.allocate(is_taken)
            link = claimed[0]
        else:
            # Check-then-save: two concurrent requests can both see the same
            # code as free; the later save overwrites the earlier one.
            code = await self.allocator.allocate(self.store.exists)
            link = Link(short_code=code, original_url=original_url, created_at=utc_now())
            await self.store.save(link)

        logger.info("Created short link %s -> %s", link.short_code, link.original_url)
        return link

    async def resolve(self, short_code: str) -> str:
        """
        Return the original URL and schedule a click increment.

        The increment is queued, not awaited: its outcome never affects
        the caller.

        Raises:
            LinkNotFoundError: If the code is unknown
        """
        link = await self.store.find_by_code(short_code)

        if self.dispatcher is not None:
            self.dispatcher.dispatch(ClickEvent(short_code=short_code))

        return link.original_url

    async def get_link(self, short_code: str) -> Link:
        """Get the full link record (raises LinkNotFoundError)."""
        return await self.store.find_by_code(short_code)

    async def list_links(self) -> List[Link]:
        """Get every stored link, in no particular order."""
        return await self.store.find_all()

    async def delete_link(self, short_code: str) -> None:
        """Delete a link (raises LinkNotFoundError)."""
        await self.store.delete(short_code)
        logger.info("Deleted short link %s", short_code)
