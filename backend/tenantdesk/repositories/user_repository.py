from typing import Optional
from sqlalchemy.orm import Session
from ..models.user import User, Role, Tenant
from ..schemas.user import UserCreate
from .base import BaseRepository, EntityDescriptor

USER_DESCRIPTOR = EntityDescriptor(
    model=User,
    collection_name="users",
    relations=("role", "tenant"),
    omit_fields=("password", "reset_token", "deleted_at"),
    soft_delete=True,
    create_schema=UserCreate,
)


class UserRepository(BaseRepository[User]):
    """Repository for User model"""

    def __init__(self, db: Session):
        super().__init__(USER_DESCRIPTOR, db)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get an active user by email, password hash included"""
        with self._database_errors("get_by_email"):
            return self._query().filter(User.email == email.strip().lower()).first()

    def email_taken(self, email: str, exclude_id: str = None) -> bool:
        """Check whether an active user already owns `email`"""
        query = self._query().filter(User.email == email)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        with self._database_errors("email_taken"):
            return query.first() is not None

    def get_or_create_tenant(self, name: str) -> Tenant:
        with self._database_errors("get_or_create_tenant"):
            tenant = self.db.query(Tenant).filter(Tenant.name == name).first()
            if tenant is None:
                tenant = Tenant(name=name)
                self.db.add(tenant)
                self.db.flush()
        return tenant

    def get_or_create_role(self, name: str) -> Role:
        with self._database_errors("get_or_create_role"):
            role = self.db.query(Role).filter(Role.name == name).first()
            if role is None:
                role = Role(name=name)
                self.db.add(role)
                self.db.flush()
        return role
