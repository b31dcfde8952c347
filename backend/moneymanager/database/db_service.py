"""
Database Service Layer - collection-style interface over the ORM models
"""
from typing import Iterable, List, Optional, Dict, Any
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy import and_, func
import uuid
import logging

from moneymanager.database.models import (
    Profile as ProfileModel,
    Category as CategoryModel,
    Income as IncomeModel,
    Expense as ExpenseModel,
)

logger = logging.getLogger(__name__)

# Collection to model mapping
COLLECTION_MODEL_MAP = {
    "profiles": ProfileModel,
    "categories": CategoryModel,
    "incomes": IncomeModel,
    "expenses": ExpenseModel,
}


class DatabaseService:
    """Database service for SQL operations."""

    def __init__(self, session: Session):
        """
        Initialize database service.

        Args:
            session: SQLAlchemy session (required)
        """
        if session is None:
            raise ValueError("Session is required")
        self.session = session

    def _model_class(self, collection: str):
        model_class = COLLECTION_MODEL_MAP.get(collection)
        if not model_class:
            raise ValueError(f"Unknown collection: {collection}")
        return model_class

    def _model_to_dict(self, model_instance) -> Dict[str, Any]:
        """Convert SQLAlchemy model instance to dictionary."""
        if model_instance is None:
            return None

        result = {}
        for column in model_instance.__table__.columns:
            value = getattr(model_instance, column.name)
            # Convert datetime to ISO format string
            if isinstance(value, datetime):
                value = value.isoformat()
            result[column.name] = value
        return result

    def _build_query_filters(self, model_class, query: Dict[str, Any]):
        """Build SQLAlchemy filter conditions from query dict."""
        filters = []
        for key, value in query.items():
            if hasattr(model_class, key):
                filters.append(getattr(model_class, key) == value)
        return filters

    def _ordering(self, model_class, order_by: Optional[str], descending: bool):
        if not order_by:
            return []
        column = getattr(model_class, order_by, None)
        if column is None:
            raise ValueError(f"Unknown sort field: {order_by}")
        ordering = [column.desc() if descending else column.asc()]
        # Stable secondary key for rows sharing the primary value
        if order_by != "created_at" and hasattr(model_class, "created_at"):
            created = model_class.created_at
            ordering.append(created.desc() if descending else created.asc())
        return ordering

    def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a document into the collection."""
        model_class = self._model_class(collection)

        # Add ID if not present
        if 'id' not in document:
            document['id'] = str(uuid.uuid4())

        # Add created_at timestamp only if the model has this field
        if 'created_at' not in document and hasattr(model_class, 'created_at'):
            document['created_at'] = datetime.utcnow()

        instance = model_class(**document)
        self.session.add(instance)
        self.session.flush()

        return self._model_to_dict(instance)

    def find(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Find documents matching the query."""
        model_class = self._model_class(collection)

        q = self.session.query(model_class)

        if query:
            filters = self._build_query_filters(model_class, query)
            if filters:
                q = q.filter(and_(*filters))

        ordering = self._ordering(model_class, order_by, descending)
        if ordering:
            q = q.order_by(*ordering)

        if limit is not None:
            q = q.limit(limit)

        results = q.all()
        return [self._model_to_dict(r) for r in results]

    def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Find the first document matching the query."""
        model_class = self._model_class(collection)

        q = self.session.query(model_class)
        filters = self._build_query_filters(model_class, query)

        if filters:
            q = q.filter(and_(*filters))

        result = q.first()
        return self._model_to_dict(result) if result else None

    def find_in(self, collection: str, field: str, values: Iterable[Any]) -> List[Dict[str, Any]]:
        """Find documents whose field is one of the given values."""
        model_class = self._model_class(collection)
        values = [v for v in set(values) if v is not None]
        if not values:
            return []

        results = self.session.query(model_class).filter(getattr(model_class, field).in_(values)).all()
        return [self._model_to_dict(r) for r in results]

    def search(
        self,
        collection: str,
        query: Dict[str, Any],
        date_field: str,
        start: date,
        end: date,
        name_contains: str = "",
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Find documents matching the query whose date_field lies in [start, end]
        and whose name contains name_contains, ignoring case.
        """
        model_class = self._model_class(collection)
        date_column = getattr(model_class, date_field)

        filters = self._build_query_filters(model_class, query)
        filters.append(date_column >= start)
        filters.append(date_column <= end)
        if name_contains:
            filters.append(func.lower(model_class.name).contains(name_contains.lower(), autoescape=True))

        q = self.session.query(model_class).filter(and_(*filters))

        ordering = self._ordering(model_class, order_by, descending)
        if ordering:
            q = q.order_by(*ordering)

        return [self._model_to_dict(r) for r in q.all()]

    def sum(self, collection: str, field: str, query: Optional[Dict[str, Any]] = None) -> Decimal:
        """Sum a numeric column over the documents matching the query, 0 when none."""
        model_class = self._model_class(collection)

        q = self.session.query(func.sum(getattr(model_class, field)))
        if query:
            filters = self._build_query_filters(model_class, query)
            if filters:
                q = q.filter(and_(*filters))

        total = q.scalar()
        if total is None:
            return Decimal("0")
        return total if isinstance(total, Decimal) else Decimal(str(total))

    def update(self, collection: str, document_id: str, update_data: Dict[str, Any]) -> int:
        """Update the document with the given id."""
        model_class = self._model_class(collection)

        # Add updated_at timestamp
        if 'updated_at' not in update_data and hasattr(model_class, 'updated_at'):
            update_data['updated_at'] = datetime.utcnow()

        q = self.session.query(model_class).filter(model_class.id == document_id)
        count = q.update(update_data, synchronize_session="fetch")
        self.session.flush()

        return count

    def delete(self, collection: str, document_id: str) -> int:
        """Delete the document with the given id."""
        model_class = self._model_class(collection)

        q = self.session.query(model_class).filter(model_class.id == document_id)
        count = q.delete(synchronize_session="fetch")
        self.session.flush()

        return count

    def exists(self, collection: str, query: Dict[str, Any]) -> bool:
        return self.find_one(collection, query) is not None

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()


def get_db_service(session: Session) -> DatabaseService:
    """
    Get database service instance.

    Args:
        session: SQLAlchemy session (required)

    Returns:
        DatabaseService instance
    """
    return DatabaseService(session)
