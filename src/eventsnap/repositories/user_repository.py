import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from eventsnap.models.user import User
from eventsnap.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    def create_user(self, email: str, password_hash: str, display_name: str | None = None, is_admin: bool = False) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email.lower(),
            password_hash=password_hash,
            display_name=display_name,
            is_admin=is_admin,
        )
        self.db.add(user)
        try:
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise
        return user

    def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        stmt = select(User).where(User.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()
