import logging
import random

import httpx

from economy.exceptions import CatalogUnavailable
from economy.models.dc_models import CharacterModel


class CatalogClient:
    """Client of the external character catalog."""

    def __init__(
        self,
        base_url: str,
        catalog_size: int,
        timeout: float = 10.0,
        max_attempts: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if catalog_size < 1:
            raise ValueError("catalog_size must be >= 1")
        self.catalog_size = catalog_size
        self.max_attempts = max_attempts
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch_character(self, character_id: int) -> CharacterModel | None:
        """Fetch one character record

        Args:
            character_id (int): Catalog id

        Raises:
            CatalogUnavailable: Network error, timeout, unexpected status or malformed body

        Returns:
            CharacterModel | None: The record, None if the catalog has no such id
        """
        try:
            response = await self.client.get(f"/character/{character_id}")
        except httpx.HTTPError as e:
            logging.error(f"Catalog request for character {character_id} failed: {e}")
            raise CatalogUnavailable() from e

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            logging.error(f"Catalog returned {response.status_code} for character {character_id}")
            raise CatalogUnavailable()

        try:
            return CharacterModel.model_validate(response.json())
        except ValueError as e:
            logging.error(f"Malformed catalog record for character {character_id}: {e}")
            raise CatalogUnavailable() from e

    async def random_character(self) -> CharacterModel:
        """Fetch a character at a random id, drawing a new id when one is missing

        Raises:
            CatalogUnavailable: No character found within max_attempts draws

        Returns:
            CharacterModel: Random catalog record
        """
        for attempt in range(1, self.max_attempts + 1):
            character_id = random.randint(1, self.catalog_size)
            character = await self.fetch_character(character_id)
            if character is not None:
                return character
            logging.info(f"Character {character_id} not found (attempt {attempt}/{self.max_attempts})")
        logging.error(f"No character found after {self.max_attempts} attempts")
        raise CatalogUnavailable()
