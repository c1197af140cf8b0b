"""FastAPI dependency injection utilities."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends, Header

from gradebook.core.config import settings
from gradebook.core.database import get_db
from gradebook.core.exceptions import AuthenticationError, PermissionDeniedError
from gradebook.core.security import verify_access_token
from gradebook.repositories.base import GradebookRepository
from gradebook.repositories.memory import InMemoryGradebookRepository
from gradebook.repositories.sql import SqlGradebookRepository
from gradebook.services.analytics import AnalyticsService
from gradebook.services.gradebook import GradebookService
from gradebook.services.importer import GradeImporter

# Process-wide store used when STORAGE_BACKEND=memory
memory_repository = InMemoryGradebookRepository()


def get_repository() -> Generator[GradebookRepository, None, None]:
    """Get the configured storage backend."""
    if settings.STORAGE_BACKEND == "memory":
        yield memory_repository
        return

    with contextmanager(get_db)() as session:
        yield SqlGradebookRepository(session)


Repository = Annotated[GradebookRepository, Depends(get_repository)]


def get_gradebook_service(repository: Repository) -> GradebookService:
    return GradebookService(repository)


def get_analytics_service(repository: Repository) -> AnalyticsService:
    return AnalyticsService(repository)


def get_importer(
    gradebook: Annotated[GradebookService, Depends(get_gradebook_service)],
) -> GradeImporter:
    return GradeImporter(gradebook)


class CallerContext:
    """Identity of the caller as asserted by its bearer token."""

    def __init__(self, subject: str | None = None, is_admin: bool = False):
        self.subject = subject
        self.is_admin = is_admin

    @property
    def is_authenticated(self) -> bool:
        return self.subject is not None


def get_caller(
    authorization: str | None = Header(None, description="Bearer token"),
) -> CallerContext:
    """Extract the caller from an optional JWT bearer token."""
    if authorization is None:
        return CallerContext()

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format")

    token = authorization[7:]  # Remove "Bearer " prefix
    payload = verify_access_token(token)

    if not payload:
        raise AuthenticationError("Invalid or expired token")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")

    return CallerContext(subject=subject, is_admin=bool(payload.get("is_admin")))


def require_admin(
    caller: Annotated[CallerContext, Depends(get_caller)],
) -> CallerContext:
    """Dependency that requires a privileged caller."""
    if not caller.is_authenticated:
        raise AuthenticationError("Authentication required")
    if not caller.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return caller


# Type aliases for dependency injection
Gradebook = Annotated[GradebookService, Depends(get_gradebook_service)]
Analytics = Annotated[AnalyticsService, Depends(get_analytics_service)]
Importer = Annotated[GradeImporter, Depends(get_importer)]
AdminCaller = Annotated[CallerContext, Depends(require_admin)]
