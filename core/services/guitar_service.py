# =============================================================================
# core/services/guitar_service.py - Guitar Catalog Business Logic
# =============================================================================
# CRUD, search, and filter operations over the guitars table.
# Separates HTTP concerns from database/business logic.
#
# The Supabase client is created once per process and handed in, so tests
# can pass an in-memory stand-in.
# =============================================================================

import logging
from typing import Any

from app.exceptions import GuitarNotFoundError, GuitarStoreError
from core.models.guitar import Guitar, GuitarCreate, GuitarFilters, GuitarUpdate
from core.services.guitar_query import (
    apply_conditions,
    build_filter_conditions,
    build_search_expression,
)

logger = logging.getLogger(__name__)


class GuitarService:
    """
    Service for guitar listing operations.

    Result order is whatever the table returns (natural order); no sort is
    applied here.
    """

    def __init__(self, client: Any, table: str = "guitars"):
        self.client = client
        self.table = table

    def _query(self):
        return self.client.table(self.table)

    @staticmethod
    def _execute(query: Any, operation: str) -> Any:
        """Run a query; store failures are logged and reported generically."""
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"Failed to {operation}: {e}")
            raise GuitarStoreError(operation) from e

    @staticmethod
    def _to_guitars(rows: list[dict[str, Any]] | None) -> list[Guitar]:
        return [Guitar.from_record(row) for row in rows or []]

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_guitar(self, guitar_id: str) -> Guitar:
        """
        Get a guitar by ID.

        Raises:
            GuitarNotFoundError: If no guitar has this ID
        """
        response = self._execute(
            self._query().select("*").eq("id", guitar_id).limit(1),
            "fetch guitar",
        )

        if not response.data:
            raise GuitarNotFoundError(guitar_id)

        return Guitar.from_record(response.data[0])

    def list_guitars(self) -> list[Guitar]:
        """Return every guitar."""
        response = self._execute(self._query().select("*"), "fetch guitars")
        return self._to_guitars(response.data)

    def search_guitars(self, text: str) -> list[Guitar]:
        """
        Case-insensitive substring search over brand, model, color, and
        description (any one matching is enough).
        """
        response = self._execute(
            self._query().select("*").or_(build_search_expression(text)),
            "search guitars",
        )
        guitars = self._to_guitars(response.data)
        logger.debug(f"Search '{text}' matched {len(guitars)} guitars")
        return guitars

    def filter_guitars(self, filters: GuitarFilters) -> list[Guitar]:
        """
        Return guitars matching every supplied filter.

        With no filters supplied this is the same as list_guitars().
        """
        conditions = build_filter_conditions(filters)
        if not conditions:
            return self.list_guitars()

        query = apply_conditions(self._query().select("*"), conditions)
        response = self._execute(query, "filter guitars")
        return self._to_guitars(response.data)

    def find_guitars(
        self,
        search: str | None = None,
        filters: GuitarFilters | None = None,
    ) -> list[Guitar]:
        """
        Search when a search string is given, otherwise filter.

        Structured filters are ignored whenever `search` is non-empty.
        """
        if search:
            return self.search_guitars(search)
        return self.filter_guitars(filters or GuitarFilters())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_guitar(self, data: GuitarCreate) -> Guitar:
        """
        Insert a new guitar. The ID is assigned by the table.

        Returns:
            The stored guitar, including its generated ID
        """
        response = self._execute(
            self._query().insert(data.to_record()),
            "create guitar",
        )

        if not response.data:
            logger.error("Insert into guitars returned no data")
            raise GuitarStoreError("create guitar")

        guitar = Guitar.from_record(response.data[0])
        logger.info(f"Created guitar: {guitar.id} ({guitar.brand} {guitar.model})")
        return guitar

    def update_guitar(self, guitar_id: str, updates: GuitarUpdate) -> Guitar:
        """
        Apply a partial update.

        Raises:
            GuitarNotFoundError: If no guitar has this ID
        """
        update_data = updates.to_record()

        if not update_data:
            return self.get_guitar(guitar_id)  # Nothing to update

        response = self._execute(
            self._query().update(update_data).eq("id", guitar_id),
            "update guitar",
        )

        if not response.data:
            raise GuitarNotFoundError(guitar_id)

        logger.info(f"Updated guitar: {guitar_id} ({', '.join(sorted(update_data))})")
        return Guitar.from_record(response.data[0])

    def delete_guitar(self, guitar_id: str) -> None:
        """
        Permanently delete a guitar.

        Raises:
            GuitarNotFoundError: If no guitar has this ID
        """
        response = self._execute(
            self._query().delete().eq("id", guitar_id),
            "delete guitar",
        )

        if not response.data:
            raise GuitarNotFoundError(guitar_id)

        logger.info(f"Deleted guitar: {guitar_id}")
