"""Persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from bazaarfly.domain.entities import User
from bazaarfly.infrastructure.models import UserModel
from bazaarfly.utils import (
    from_storage_datetime,
    now_in_app_timezone,
    to_storage_datetime,
)


class UserRepository:
    """Look up the users notifications are addressed to.

    Soft-deleted users are excluded only where a caller asks for it:
    :meth:`find_active_by_id` applies the predicate, :meth:`get` lets the
    caller choose.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_active_by_id(self, user_id: int) -> User | None:
        return self.get(user_id, include_deleted=False)

    def get(self, user_id: int, *, include_deleted: bool = False) -> User | None:
        model = self._get_model(include_deleted=include_deleted, id=user_id)
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel()
        self._apply_entity_to_model(model, user)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def soft_delete(self, user_id: int) -> None:
        model = self._get_model(id=user_id)
        if not model:
            msg = f"User with id {user_id} not found"
            raise ValueError(msg)

        model.is_deleted = True
        model.deleted_at = to_storage_datetime(now_in_app_timezone())
        self.session.add(model)
        self.session.commit()

    def _get_model(self, include_deleted: bool = False, **filters) -> UserModel | None:
        query = self.session.query(UserModel)
        if not include_deleted:
            query = query.filter(UserModel.is_deleted.is_(False))
        return query.filter_by(**filters).first()

    @staticmethod
    def _apply_entity_to_model(model: UserModel, user: User) -> None:
        model.name = user.name
        model.email = user.email
        model.phone_number = user.phone_number
        model.role = user.role
        model.is_deleted = user.is_deleted
        model.deleted_at = to_storage_datetime(user.deleted_at)
        if user.created_at is not None:
            model.created_at = to_storage_datetime(user.created_at)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            phone_number=model.phone_number,
            role=model.role,
            is_deleted=model.is_deleted,
            deleted_at=from_storage_datetime(model.deleted_at),
            created_at=from_storage_datetime(model.created_at),
        )


__all__ = ["UserRepository"]
