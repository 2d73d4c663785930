"""FastAPI dependencies: the authenticated caller and service construction.

Stores are built per request around the request's SQLAlchemy session. The
access log store wraps the process-wide Mongo handle created at startup and
is ``None`` while MongoDB is unreachable.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import UnauthenticatedError
from app.models.user import User
from app.security import decode_access_token
from app.services.access_log_service import AccessLogService
from app.services.audit_recorder import AuditRecorder
from app.services.auth_service import AuthService
from app.services.authorization import Actor
from app.services.category_service import CategoryService
from app.services.certificate_service import CertificateService
from app.services.dashboard_service import DashboardService
from app.services.event_service import EventService
from app.services.registration_service import RegistrationService
from app.services.user_service import UserService
from app.stores.interfaces import AccessLogStore
from app.stores.mongo_store import ACCESS_LOG_COLLECTION, MongoAccessLogStore
from app.stores.sql_store import (
    SqlCategoryStore,
    SqlCertificateStore,
    SqlEventStore,
    SqlRegistrationStore,
    SqlUserStore,
)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class ClientInfo:
    ip: Optional[str]
    device: Optional[str]


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip=request.client.host if request.client else None,
        device=request.headers.get("user-agent"),
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Authentication required")
    user_id = decode_access_token(credentials.credentials)
    user = SqlUserStore(db).get(user_id)
    if not user:
        raise UnauthenticatedError("User no longer exists")
    return user


def get_actor(user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


def get_access_log_store(request: Request) -> Optional[AccessLogStore]:
    mongo = getattr(request.app.state, "mongo", None)
    if mongo is None or not mongo.available:
        return None
    return MongoAccessLogStore(mongo.collection(ACCESS_LOG_COLLECTION))


def get_audit_recorder(store: Optional[AccessLogStore] = Depends(get_access_log_store)) -> AuditRecorder:
    return AuditRecorder(store)


def get_auth_service(
    db: Session = Depends(get_db), recorder: AuditRecorder = Depends(get_audit_recorder)
) -> AuthService:
    return AuthService(SqlUserStore(db), recorder)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(SqlUserStore(db))


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(SqlCategoryStore(db))


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    return EventService(SqlEventStore(db), SqlCategoryStore(db), SqlRegistrationStore(db))


def get_registration_service(
    db: Session = Depends(get_db), recorder: AuditRecorder = Depends(get_audit_recorder)
) -> RegistrationService:
    return RegistrationService(SqlRegistrationStore(db), SqlEventStore(db), SqlUserStore(db), recorder)


def get_certificate_service(
    db: Session = Depends(get_db), recorder: AuditRecorder = Depends(get_audit_recorder)
) -> CertificateService:
    return CertificateService(SqlCertificateStore(db), SqlRegistrationStore(db), SqlEventStore(db), recorder)


def get_access_log_service(
    db: Session = Depends(get_db), store: Optional[AccessLogStore] = Depends(get_access_log_store)
) -> AccessLogService:
    return AccessLogService(store, SqlUserStore(db), SqlEventStore(db))


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(
        SqlUserStore(db), SqlEventStore(db), SqlRegistrationStore(db), SqlCertificateStore(db)
    )
