from __future__ import annotations

import hashlib
import os

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from pestops.domain.models import BootstrapAdminRequest, User, UserCreate, UserRole
from pestops.domain.permissions import permissions_for_role
from pestops.infra.db import get_engine

logger = structlog.get_logger(__name__)


class IdentityError(Exception):
    pass


class NotFoundError(IdentityError):
    pass


class ConflictError(IdentityError):
    pass


class AuthError(IdentityError):
    pass


class IdentityService:
    def _session(self) -> Session:
        return Session(get_engine(), expire_on_commit=False)

    def _hash_password(self, raw_password: str) -> str:
        salt = os.getenv("PASSWORD_SALT", "pestops-dev-salt")
        return hashlib.sha256(f"{salt}:{raw_password}".encode()).hexdigest()

    def bootstrap_admin(self, payload: BootstrapAdminRequest) -> User:
        with self._session() as session:
            if session.exec(select(User)).first() is not None:
                raise ConflictError("system already initialized")
            admin = User(
                username=payload.username,
                name=payload.name,
                password_hash=self._hash_password(payload.password),
                role=UserRole.ADMIN,
            )
            session.add(admin)
            session.commit()
            session.refresh(admin)
        logger.info("admin_bootstrapped", user_id=admin.id)
        return admin

    def create_user(self, payload: UserCreate) -> User:
        with self._session() as session:
            user = User(
                username=payload.username,
                name=payload.name,
                password_hash=self._hash_password(payload.password),
                role=payload.role,
            )
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("username already exists") from exc
            session.refresh(user)
        logger.info("user_created", user_id=user.id, role=str(user.role))
        return user

    def get_user(self, user_id: str) -> User:
        with self._session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("user not found")
            return user

    def dev_login(self, username: str, password: str) -> tuple[User, list[str]]:
        with self._session() as session:
            user = session.exec(select(User).where(User.username == username)).first()
            if user is None or not user.is_active:
                raise AuthError("invalid credentials")
            if user.password_hash != self._hash_password(password):
                raise AuthError("invalid credentials")
            return user, permissions_for_role(str(user.role))

    def active_admin_ids(self, session: Session) -> list[str]:
        statement = (
            select(User.id)
            .where(User.is_active == True)  # noqa: E712
            .where(User.role.in_([UserRole.ADMIN, UserRole.BOTH]))  # type: ignore[attr-defined]
        )
        return list(session.exec(statement).all())
