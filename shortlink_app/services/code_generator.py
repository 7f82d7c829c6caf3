import logging
from typing import Optional

from shortlink_app.config import settings
from shortlink_app.errors import ConflictError, ExhaustedError
from shortlink_app.models.link import ShortLink
from shortlink_app.services.link_registry import LinkRegistry
from shortlink_app.services.short_code_factory import ShortCodeFactory
from shortlink_app.services.short_code_strategies import ShortCodeStrategy
from shortlink_app.utils.validators import validate_custom_alias, validate_destination_url

logger = logging.getLogger(__name__)


class CodeGenerator:
    """
    Hands out short codes, never without the registry confirming uniqueness.

    Every candidate is reserved by inserting it through
    ``LinkRegistry.create``; a collision there is the only uniqueness check.
    """

    def __init__(
        self,
        registry: LinkRegistry,
        strategy: Optional[ShortCodeStrategy] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Args:
            registry: Link registry used as the reservation point
            strategy: Candidate strategy; defaults to the configured one
            max_attempts: Bound on generated-code collisions before giving up
        """
        self.registry = registry
        self.strategy = strategy or ShortCodeFactory.create_strategy()
        self.max_attempts = max_attempts or settings.code_max_attempts

    async def generate(
        self,
        owner_id: str,
        destination_url: str,
        custom_alias: Optional[str] = None,
    ) -> ShortLink:
        """
        Reserve a code for a new link and return the created link.

        With ``custom_alias``: validate it and reserve exactly that code.
        Without: propose candidates until one is reserved.

        Raises:
            ValidationError: bad alias or destination
            ConflictError: custom alias already taken (never retried)
            ExhaustedError: every attempt collided, or the keyspace ran out
        """
        validate_destination_url(destination_url)

        if custom_alias is not None:
            validate_custom_alias(custom_alias)
            return await self.registry.create(owner_id, destination_url, custom_alias)

        for attempt in range(1, self.max_attempts + 1):
            sequence = await self.registry.next_sequence() if self.strategy.uses_sequence else None
            candidate = self.strategy.generate(sequence)

            try:
                return await self.registry.create(owner_id, destination_url, candidate)
            except ConflictError:
                logger.warning(
                    "Short code collision on %s (attempt %d/%d)",
                    candidate, attempt, self.max_attempts,
                )

        logger.error("Gave up generating a short code after %d attempts", self.max_attempts)
        raise ExhaustedError(
            f"Unable to generate a unique short code after {self.max_attempts} attempts"
        )
