"""Base repository with common CRUD operations for all repositories."""

from typing import Dict, List, Optional, Any, Sequence

from supabase import Client

from talentbridge.errors import NotFoundError, PersistenceError


class BaseRepository:
    """Base repository providing common CRUD operations.

    Encapsulates standard database operations that are shared across
    all repositories, reducing code duplication and ensuring consistency.
    Every database failure surfaces as a PersistenceError.

    Attributes:
        db_client: Supabase client instance for database operations.
        table_name: Name of the database table this repository manages.
        entity_name: Human-readable entity name used in error messages.
    """

    entity_name = "Record"

    def __init__(self, db_client: Client, table_name: str):
        """Initialize the base repository.

        Args:
            db_client: Supabase client instance.
            table_name: Name of the database table (e.g., "candidates", "quote_requests").
        """
        self.db_client = db_client
        self.table_name = table_name

    def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a single record by its ID.

        Args:
            record_id: The unique identifier of the record.

        Returns:
            Record as dictionary if found, None otherwise.

        Raises:
            PersistenceError: If database query fails.
        """
        try:
            response = (
                self.db_client.table(self.table_name)
                .select("*")
                .eq("id", record_id)
                .limit(1)
                .execute()
            )
            return response.data[0] if response.data else None
        except Exception as error:
            raise PersistenceError(f"Failed to get {self.table_name} by ID: {str(error)}") from error

    def find_many(
        self,
        filters: Optional[Dict[str, Any]] = None,
        in_filters: Optional[Dict[str, Sequence[Any]]] = None,
        order_by: Optional[str] = None,
        desc: bool = True,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Retrieve records matching equality and membership filters.

        Args:
            filters: Column -> value equality filters.
            in_filters: Column -> allowed values filters.
            order_by: Optional column to sort by.
            desc: Sort descending when order_by is given.
            limit: Optional maximum number of rows.

        Returns:
            List of matching records.

        Raises:
            PersistenceError: If database query fails.
        """
        try:
            query = self.db_client.table(self.table_name).select("*")

            for column, value in (filters or {}).items():
                query = query.eq(column, value)

            for column, values in (in_filters or {}).items():
                query = query.in_(column, list(values))

            if order_by:
                query = query.order(order_by, desc=desc)

            if limit:
                query = query.limit(limit)

            return query.execute().data
        except Exception as error:
            raise PersistenceError(f"Failed to query {self.table_name}: {str(error)}") from error

    def find_one(self, **filters: Any) -> Optional[Dict[str, Any]]:
        """Retrieve the first record matching all equality filters."""
        rows = self.find_many(filters, limit=1, order_by=None)
        return rows[0] if rows else None

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new record into the table.

        Args:
            data: Dictionary containing record data matching the table schema.

        Returns:
            Dictionary containing the inserted record.

        Raises:
            PersistenceError: If insertion fails (e.g., duplicate key, constraint violation).
        """
        try:
            response = self.db_client.table(self.table_name).insert(data).execute()
        except Exception as error:
            raise PersistenceError(f"Failed to create {self.table_name}: {str(error)}") from error

        if not response.data:
            raise PersistenceError(f"Failed to create {self.table_name}: no row returned")
        return response.data[0]

    def update(self, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update a record with new data.

        Args:
            record_id: The unique identifier of the record to update.
            updates: Dictionary of fields to update.

        Returns:
            Updated record as dictionary.

        Raises:
            NotFoundError: If no record has this ID.
            PersistenceError: If update fails.
        """
        try:
            response = (
                self.db_client.table(self.table_name)
                .update(updates)
                .eq("id", record_id)
                .execute()
            )
        except Exception as error:
            raise PersistenceError(f"Failed to update {self.table_name}: {str(error)}") from error

        if not response.data:
            raise NotFoundError(self.entity_name, record_id)

        return response.data[0]

    # Typed helpers for repositories that declare a model_class

    model_class = None

    def to_model(self, row: Optional[Dict[str, Any]]):
        """Convert a database row into the repository's Pydantic model."""
        if row is None:
            return None
        return self.model_class(**row)

    def get_model(self, record_id: str):
        """Retrieve a record by ID as a model, or None if not found."""
        return self.to_model(self.get_by_id(record_id))

    def require_model(self, record_id: str):
        """Retrieve a record by ID as a model.

        Raises:
            NotFoundError: If no record has this ID.
        """
        model = self.get_model(record_id)
        if model is None:
            raise NotFoundError(self.entity_name, record_id)
        return model

    def find_models(self, *args: Any, **kwargs: Any) -> List[Any]:
        """Same as find_many, returning models."""
        return [self.to_model(row) for row in self.find_many(*args, **kwargs)]

    def insert_model(self, model):
        """Insert a model, letting the database fill unset columns."""
        data = model.model_dump(mode="json", exclude_none=True)
        return self.to_model(self.create(data))

    def save_fields(self, model, fields: Sequence[str]):
        """Persist only the named fields of a model and return the stored row."""
        data = model.model_dump(mode="json", include=set(fields))
        return self.to_model(self.update(model.id, data))

    def delete(self, record_id: str) -> bool:
        """Delete a record from the table.

        Args:
            record_id: The unique identifier of the record to delete.

        Returns:
            True if deletion was successful.

        Raises:
            PersistenceError: If deletion fails.
        """
        try:
            (
                self.db_client.table(self.table_name)
                .delete()
                .eq("id", record_id)
                .execute()
            )
            return True
        except Exception as error:
            raise PersistenceError(f"Failed to delete {self.table_name}: {str(error)}") from error
