import json
import math
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Tuple, Type, TypeVar

import pandas as pd
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import String
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, Query, selectinload

from ..core.database import Base
from ..exceptions import ApiException, ValidationError, format_database_error
from ..schemas.query import FindByQuery, SortDirection
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

# Hook applied to each validated import row before it is inserted
RowPreparer = Callable[[Dict[str, Any]], Dict[str, Any]]


def normalize_field_name(name: str) -> str:
    """createdAt, created_at and CreatedAt all normalise to createdat"""
    return str(name).replace("_", "").replace(" ", "").lower()


FILTER_SCALARS = (str, int, float, bool)


def _is_filter_value(value: Any) -> bool:
    if value is None or isinstance(value, FILTER_SCALARS):
        return True
    if isinstance(value, (list, tuple)):
        return all(item is None or isinstance(item, FILTER_SCALARS) for item in value)
    return False


@dataclass(frozen=True)
class EntityDescriptor:
    """Describes how one entity type is read, written and exported"""
    model: Type[Base]
    collection_name: str
    relations: Tuple[str, ...] = ()
    omit_fields: Tuple[str, ...] = ()
    soft_delete: bool = False
    create_schema: Optional[Type[BaseModel]] = None
    immutable_fields: Tuple[str, ...] = ("id", "created_at", "updated_at", "deleted_at")

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    @property
    def label(self) -> str:
        return self.collection_name.capitalize()

    @property
    def columns(self) -> List[str]:
        """Column names in declaration order"""
        return [column.key for column in self.model.__table__.columns]

    @property
    def public_columns(self) -> List[str]:
        return [name for name in self.columns if name not in self.omit_fields]


class BaseRepository(Generic[ModelType]):
    """Generic CRUD, query, import and export operations driven by an EntityDescriptor"""

    def __init__(self, descriptor: EntityDescriptor, db: Session):
        self.descriptor = descriptor
        self.model = descriptor.model
        self.db = db
        self._field_index = {normalize_field_name(name): name for name in descriptor.columns}

    @property
    def log_prefix(self) -> str:
        return f"[{self.descriptor.label} Repository]"

    @contextmanager
    def _database_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"{self.log_prefix} {action} failed: {e}")
            raise format_database_error(e) from e

    def _query(self) -> Query:
        query = self.db.query(self.model)
        for relation in self.descriptor.relations:
            query = query.options(selectinload(getattr(self.model, relation)))
        if self.descriptor.soft_delete:
            query = query.filter(self.model.deleted_at.is_(None))
        return query

    def _default_order(self) -> list:
        order = []
        if "created_at" in self.descriptor.columns:
            order.append(self.model.created_at.asc())
        order.append(self.model.id.asc())
        return order

    def resolve_field(self, name: str, allow_omitted: bool = False) -> str:
        """Map a client-supplied field name onto a column, rejecting unknown or hidden fields"""
        field = self._field_index.get(normalize_field_name(name))
        if field is None or (not allow_omitted and field in self.descriptor.omit_fields):
            raise ValidationError(f"Unknown field: {name}", resource=self.descriptor.collection_name)
        return field

    def get_all(self) -> List[ModelType]:
        """Every readable record in default order"""
        with self._database_errors("get_all"):
            return self._query().order_by(*self._default_order()).all()

    def get_by_id(self, id: str) -> Optional[ModelType]:
        """Get a record by ID, None when missing"""
        with self._database_errors("get_by_id"):
            return self._query().filter(self.model.id == id).first()

    def get_many(self, ids: Iterable[str]) -> List[ModelType]:
        """Readable records whose id is in `ids`"""
        with self._database_errors("get_many"):
            return self._query().filter(self.model.id.in_(list(ids))).order_by(*self._default_order()).all()

    def get_by_field(self, field: str, value: Any) -> List[ModelType]:
        """Records whose `field` equals `value`"""
        column = getattr(self.model, self.resolve_field(field, allow_omitted=True))
        with self._database_errors("get_by_field"):
            return self._query().filter(column == value).order_by(*self._default_order()).all()

    def _filter_clause(self, field: str, value: Any):
        column = getattr(self.model, self.resolve_field(field))
        if not _is_filter_value(value):
            raise ValidationError(f"Unsupported filter value for {field}", resource=self.descriptor.collection_name)
        if value is None:
            return column.is_(None)
        if isinstance(value, (list, tuple)):
            return column.in_(value)
        if isinstance(value, str) and isinstance(column.type, String):
            return column.icontains(value, autoescape=True)
        return column == value

    def find_by_query(self, query: FindByQuery) -> Dict[str, Any]:
        """
        Translate pagination, ordering and filters into a store query.

        Filters are ANDed. Strings match case-insensitively as substrings,
        null matches missing values, lists match any member and every other
        scalar matches by equality. An id tiebreaker keeps paging stable.

        Returns:
            Dict with items, total_count, page, page_size and total_pages
        """
        statement = self._query()
        for field, value in (query.filter or {}).items():
            statement = statement.filter(self._filter_clause(field, value))

        order = []
        for order_by in query.order_by:
            column = getattr(self.model, self.resolve_field(order_by.field))
            order.append(column.desc() if order_by.direction == SortDirection.DESC else column.asc())
        order = order + [self.model.id.asc()] if order else self._default_order()

        with self._database_errors("find_by_query"):
            total_count = statement.count()
            statement = statement.order_by(*order)
            if query.paginate is None:
                items = statement.all()
                page, page_size = 1, total_count
                total_pages = 1 if total_count else 0
            else:
                page, page_size = query.paginate.page, query.paginate.page_size
                items = statement.offset((page - 1) * page_size).limit(page_size).all()
                total_pages = math.ceil(total_count / page_size)

        logger.debug(f"{self.log_prefix} find_by_query matched {total_count} records")
        return {
            "items": items,
            "total_count": total_count,
            "page": page,
            "page_size": page_size,
            "total_pages": total_pages,
        }

    def create(self, data: Dict[str, Any]) -> ModelType:
        """Create a new record"""
        instance = self.model(**data)
        with self._database_errors("create"):
            self.db.add(instance)
            self.db.flush()  # Flush instead of commit to allow rollback
        logger.debug(f"{self.log_prefix} Created {self.descriptor.entity_name} with id: {instance.id}")
        return instance

    def update(self, id: str, data: Dict[str, Any]) -> Optional[ModelType]:
        """Partial update; keys absent from `data` are left unchanged"""
        instance = self.get_by_id(id)
        if instance is None:
            return None
        for key, value in data.items():
            if key in self.descriptor.immutable_fields:
                continue
            setattr(instance, key, value)
        with self._database_errors("update"):
            self.db.flush()
        logger.debug(f"{self.log_prefix} Updated {self.descriptor.entity_name} with id: {id}")
        return instance

    def delete(self, id: str) -> Optional[ModelType]:
        """Delete (or soft-delete) a record and return it"""
        instance = self.get_by_id(id)
        if instance is None:
            return None
        with self._database_errors("delete"):
            if self.descriptor.soft_delete:
                instance.deleted_at = datetime.now(timezone.utc)
            else:
                self.db.delete(instance)
            self.db.flush()
        logger.debug(f"{self.log_prefix} Deleted {self.descriptor.entity_name} with id: {id}")
        return instance

    def delete_many(self, ids: Iterable[str]) -> int:
        """Delete every record in `ids`, returning how many were affected"""
        ids = list(ids)
        with self._database_errors("delete_many"):
            statement = self.db.query(self.model).filter(self.model.id.in_(ids))
            if self.descriptor.soft_delete:
                deleted_count = statement.filter(self.model.deleted_at.is_(None)).update(
                    {self.model.deleted_at: datetime.now(timezone.utc)}, synchronize_session=False
                )
            else:
                deleted_count = statement.delete(synchronize_session=False)
            self.db.flush()
        self.db.expire_all()
        logger.debug(f"{self.log_prefix} Deleted {deleted_count} of {len(ids)} requested records")
        return deleted_count

    def _row_to_payload(self, row: Dict[str, Any]) -> Dict[str, Any]:
        data = {}
        for key, value in row.items():
            field = self._field_index.get(normalize_field_name(key))
            if field is None or field in self.descriptor.immutable_fields:
                continue
            data[field] = value
        schema = self.descriptor.create_schema
        if schema is None:
            return data
        return schema.model_validate(data).model_dump(exclude_none=True)

    def import_rows(self, rows: List[Dict[str, Any]], prepare: RowPreparer = None) -> Dict[str, Any]:
        """
        Create one record per row, each inside its own savepoint.

        A row that fails validation or violates a constraint is rolled back on
        its own and reported; the remaining rows are still imported.

        Returns:
            Dict with created_count, skipped_count and errors ([{row, error}], 1-based)
        """
        created_count = 0
        errors = []
        for index, row in enumerate(rows, start=1):
            try:
                with self.db.begin_nested():
                    payload = self._row_to_payload(row)
                    if prepare is not None:
                        payload = prepare(payload)
                    self.db.add(self.model(**payload))
                    self.db.flush()
                created_count += 1
            except PydanticValidationError as e:
                errors.append({"row": index, "error": "; ".join(err["msg"] for err in e.errors())})
            except IntegrityError as e:
                errors.append({"row": index, "error": format_database_error(e).message})
            except (ValueError, TypeError) as e:
                errors.append({"row": index, "error": str(e)})
            except ApiException as e:
                errors.append({"row": index, "error": e.message})

        logger.info(f"{self.log_prefix} Imported {created_count} rows, skipped {len(errors)}")
        return {"created_count": created_count, "skipped_count": len(errors), "errors": errors}

    def to_dict(self, instance: ModelType) -> Dict[str, Any]:
        """Public columns of a record, in declaration order"""
        return {name: getattr(instance, name) for name in self.descriptor.public_columns}

    def export_csv(self) -> Optional[str]:
        """Serialise every readable record as CSV text, None when there is nothing to export"""
        records = self.get_all()
        if not records:
            return None
        rows = []
        for record in records:
            row = self.to_dict(record)
            for key, value in row.items():
                if isinstance(value, (dict, list)):
                    row[key] = json.dumps(value, ensure_ascii=False)
            rows.append(row)
        frame = pd.DataFrame(rows, columns=self.descriptor.public_columns)
        logger.info(f"{self.log_prefix} Exporting {len(rows)} records")
        return frame.to_csv(index=False)

    def commit(self) -> None:
        """Commit the current transaction"""
        with self._database_errors("commit"):
            self.db.commit()

    def rollback(self) -> None:
        """Rollback the current transaction"""
        self.db.rollback()
