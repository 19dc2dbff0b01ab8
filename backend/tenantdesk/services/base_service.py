from contextlib import contextmanager
from typing import Any, Dict, Generic, List, TypeVar, Union
from pydantic import BaseModel
from ..repositories.base import BaseRepository
from ..schemas.query import FindByQuery
from ..exceptions import NotFoundError, ValidationError
from ..utils.csv_import import FileInput, csv_to_records
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")

Payload = Union[BaseModel, Dict[str, Any]]


class BaseService(Generic[ModelType]):
    """
    CRUD, query, import and export for one collection

    Wraps a repository, turning missing records into NotFoundError and
    committing each write (rolled back, logged and re-raised on failure).
    Domain services override the `prepare_*` hooks or the write methods to
    add their own rules.
    """

    def __init__(self, repository: BaseRepository):
        self.repository = repository
        self.db = repository.db
        self.descriptor = repository.descriptor

    @property
    def log_prefix(self) -> str:
        return f"[{self.descriptor.label} Service]"

    @contextmanager
    def transaction(self, action: str):
        """Commit on success; roll back, log and re-raise on failure"""
        try:
            yield
            self.repository.commit()
        except Exception as e:
            logger.error(f"{self.log_prefix} {action} failed: {e}")
            self.repository.rollback()
            raise

    @staticmethod
    def _as_dict(data: Payload, exclude_unset: bool = False) -> Dict[str, Any]:
        if isinstance(data, BaseModel):
            return data.model_dump(exclude_unset=exclude_unset)
        return dict(data)

    def get_all(self) -> List[ModelType]:
        logger.debug(f"{self.log_prefix} get_all")
        return self.repository.get_all()

    def get_by_id(self, id: str) -> ModelType:
        instance = self.repository.get_by_id(id)
        if instance is None:
            logger.warning(f"{self.log_prefix} {self.descriptor.entity_name} not found: {id}")
            raise NotFoundError(self.descriptor.entity_name, id)
        return instance

    def get_by_field(self, field: str, value: Any) -> List[ModelType]:
        return self.repository.get_by_field(field, value)

    def find_by_query(self, query: FindByQuery) -> Dict[str, Any]:
        logger.debug(f"{self.log_prefix} find_by_query {query.model_dump()}")
        return self.repository.find_by_query(query)

    def prepare_create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return data

    def prepare_update(self, id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return data

    def prepare_import_row(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.prepare_create(data)

    def create(self, data: Payload) -> ModelType:
        """Create a new record"""
        logger.info(f"{self.log_prefix} Creating {self.descriptor.entity_name}")
        with self.transaction("create"):
            instance = self.repository.create(self.prepare_create(self._as_dict(data)))
        logger.info(f"{self.log_prefix} {self.descriptor.entity_name} created: {instance.id}")
        return instance

    def update(self, id: str, data: Payload) -> ModelType:
        """Partial update; only fields the caller set are written"""
        logger.info(f"{self.log_prefix} Updating {self.descriptor.entity_name} {id}")
        with self.transaction("update"):
            self.get_by_id(id)
            changes = self.prepare_update(id, self._as_dict(data, exclude_unset=True))
            instance = self.repository.update(id, changes)
        return instance

    def delete(self, id: str) -> Dict[str, Any]:
        """Delete a record and return a snapshot of it"""
        logger.info(f"{self.log_prefix} Deleting {self.descriptor.entity_name} {id}")
        with self.transaction("delete"):
            snapshot = self.repository.to_dict(self.get_by_id(id))
            self.repository.delete(id)
        return snapshot

    @staticmethod
    def validate_ids(ids: Any) -> List[str]:
        if not isinstance(ids, list) or not ids:
            raise ValidationError("Invalid or empty array of ids")
        return ids

    def delete_many(self, ids: Any) -> Dict[str, int]:
        """Delete every listed record; deleting nothing is a NotFoundError"""
        ids = self.validate_ids(ids)
        logger.info(f"{self.log_prefix} Deleting {len(ids)} records")
        with self.transaction("delete_many"):
            deleted_count = self.repository.delete_many(ids)
            if deleted_count == 0:
                raise NotFoundError(
                    self.descriptor.entity_name,
                    detail=f"No {self.descriptor.collection_name} found to delete",
                )
        return {"deleted_count": deleted_count}

    def import_csv(self, source: FileInput) -> Dict[str, Any]:
        """Import every row of a CSV file, skipping rows that fail"""
        records = csv_to_records(source)
        logger.info(f"{self.log_prefix} Importing {len(records)} rows")
        with self.transaction("import"):
            result = self.repository.import_rows(records, prepare=self.prepare_import_row)
        return result

    def export_csv(self) -> str:
        """Every readable record as CSV text"""
        content = self.repository.export_csv()
        if content is None:
            raise NotFoundError(
                self.descriptor.entity_name,
                detail=f"No {self.descriptor.collection_name} found to export",
            )
        return content

