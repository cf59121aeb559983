import logging
from typing import Awaitable, Callable

from shortlink_app.exceptions import GenerationExhaustedError
from shortlink_app.services.short_code_strategies import ShortCodeStrategy

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


class CodeAllocator:
    """
    Produces a short code that is currently unused.

    Stateless: the answer depends only on what the store holds. The
    ``is_taken`` callback decides what "unused" means:

    - ``store.exists`` gives check-then-save. Another request can pass the
      same check before either saves, and the later save wins.
    - a callback that claims the code atomically (``store.create_if_absent``)
      closes that window.
    """

    def __init__(
        self,
        strategy: ShortCodeStrategy,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.strategy = strategy
        self.max_attempts = max_attempts

    async def allocate(self, is_taken: Callable[[str], Awaitable[bool]]) -> str:
        """
        Return the first generated candidate for which ``is_taken`` is False.

        Raises:
            GenerationExhaustedError: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.strategy.generate()
            if not await is_taken(code):
                return code
            logger.debug(
                "Short code collision on %s (attempt %d/%d)",
                code, attempt, self.max_attempts,
            )

        logger.error("Short code space exhausted after %d attempts", self.max_attempts)
        raise GenerationExhaustedError(self.max_attempts)
