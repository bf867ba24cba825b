"""SQL-backed entity store; each call runs in its own session and commits on its own"""

from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from registration_admin.infrastructure.database.models import MODELS_BY_TABLE
from registration_admin.domain.exceptions import StoreError, UnknownTableError
from registration_admin.domain.models import Record


def to_record(row) -> Record:
    """Flatten an ORM row into a plain column -> value dict"""
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


class SqlEntityStore:
    """Entity store over SQLAlchemy sessions"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _model(self, table: str):
        try:
            return MODELS_BY_TABLE[table]
        except KeyError as e:
            raise UnknownTableError(f"Unknown table: {table}") from e

    def _check_columns(self, model, names) -> None:
        unknown = set(names) - set(model.__table__.columns.keys())
        if unknown:
            raise StoreError(f"Unknown column(s) for {model.__tablename__}: {', '.join(sorted(unknown))}")

    async def insert(self, table: str, record: Dict[str, Any]) -> Record:
        model = self._model(table)
        self._check_columns(model, record)
        with self.session_factory() as db:
            try:
                row = model(**record)
                db.add(row)
                db.commit()
                db.refresh(row)
                return to_record(row)
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Insert into {table} failed: {e}") from e

    async def update(self, table: str, record_id: Any, patch: Dict[str, Any]) -> Optional[Record]:
        model = self._model(table)
        self._check_columns(model, patch)
        with self.session_factory() as db:
            try:
                row = db.get(model, record_id)
                if row is None:
                    return None
                for key, value in patch.items():
                    setattr(row, key, value)
                db.commit()
                db.refresh(row)
                return to_record(row)
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Update of {table} {record_id} failed: {e}") from e

    async def delete(self, table: str, record_id: Any) -> None:
        model = self._model(table)
        with self.session_factory() as db:
            try:
                db.query(model).filter(model.id == record_id).delete()
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"Delete from {table} {record_id} failed: {e}") from e

    async def get(
        self,
        table: str,
        record_id: Any,
        select: Optional[Sequence[str]] = None,
    ) -> Optional[Record]:
        model = self._model(table)
        if select:
            self._check_columns(model, select)
        with self.session_factory() as db:
            try:
                row = db.get(model, record_id)
            except SQLAlchemyError as e:
                raise StoreError(f"Fetch of {table} {record_id} failed: {e}") from e
            if row is None:
                return None
            record = to_record(row)
        if select:
            return {name: record[name] for name in select}
        return record

    async def find(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Record]:
        model = self._model(table)
        filters = filters or {}
        self._check_columns(model, list(filters) + ([order_by] if order_by else []))
        with self.session_factory() as db:
            try:
                query = db.query(model).filter_by(**filters)
                if order_by:
                    column = getattr(model, order_by)
                    # id breaks ties between rows sharing a timestamp
                    if descending:
                        query = query.order_by(column.desc(), model.id.desc())
                    else:
                        query = query.order_by(column.asc(), model.id.asc())
                return [to_record(row) for row in query.all()]
            except SQLAlchemyError as e:
                raise StoreError(f"Query of {table} failed: {e}") from e
