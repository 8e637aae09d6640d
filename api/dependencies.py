"""
API dependencies: actor resolution, pagination and service providers.
"""

from dataclasses import dataclass
from typing import Annotated, Callable, Optional

from fastapi import Depends, Header, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import APIError, ServiceError
from core.interfaces import ArticleService, ColumnService, CommentService
from core.security import TokenService
from infrastructure.config.settings import settings
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User, UserRole
from services import SqlArticleService, SqlColumnService, SqlCommentService

token_service = TokenService(
    secret_key=settings.jwt_secret_key,
    algorithm=settings.jwt_algorithm,
    access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
)

MAX_PAGE_SIZE = 50


# ============================================================================
# Actor
# ============================================================================


@dataclass(frozen=True)
class AuthenticatedRequest:
    """Identity of the caller, established from a verified access token."""

    actor_id: str
    role: str
    request: Request

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value)

    @property
    def is_vip(self) -> bool:
        return self.role == UserRole.VIP.value or self.is_admin


def _extract_token(request: Request, authorization: str | None) -> str | None:
    """Bearer header first, then the ``token`` query parameter."""
    if authorization and authorization.startswith("Bearer "):
        parts = authorization.split(" ", 1)
        if len(parts) > 1 and parts[1].strip():
            return parts[1].strip()
    token = request.query_params.get("token")
    return token or None


async def get_optional_actor(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> Optional[AuthenticatedRequest]:
    """
    Resolve the caller if a valid token is presented.

    Invalid or expired tokens are treated as anonymous. A valid token whose
    subject is unknown or no longer active is rejected. The role is read from
    the stored user, never from the token claim.
    """
    token = _extract_token(request, authorization)
    if not token:
        return None

    payload = token_service.verify_access_token(token)
    if not payload:
        return None

    # Get user from database
    result = await db.execute(select(User).where(User.id == payload.sub))
    user = result.scalar_one_or_none()

    if not user:
        raise APIError.unauthorized("User not found")

    if not user.is_active:
        raise APIError.unauthorized("User account is not active")

    request.state.user_id = user.id
    return AuthenticatedRequest(
        actor_id=user.id,
        role=user.role,
        request=request,
    )


async def get_current_actor(
    actor: Annotated[Optional[AuthenticatedRequest], Depends(get_optional_actor)],
) -> AuthenticatedRequest:
    """Dependency for routes that require an authenticated caller."""
    if actor is None:
        raise APIError.unauthorized()
    return actor


async def get_admin_actor(
    actor: Annotated[AuthenticatedRequest, Depends(get_current_actor)],
) -> AuthenticatedRequest:
    """Ensures the stored user holds the admin or super_admin role."""
    if not actor.is_admin:
        raise ServiceError.forbidden("Admin access required")
    return actor


CurrentActor = Annotated[AuthenticatedRequest, Depends(get_current_actor)]
OptionalActor = Annotated[Optional[AuthenticatedRequest], Depends(get_optional_actor)]
AdminActor = Annotated[AuthenticatedRequest, Depends(get_admin_actor)]


# ============================================================================
# Pagination
# ============================================================================


@dataclass(frozen=True)
class PageParams:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def parse_int(value: str | None, default: int) -> int:
    """Lenient integer parsing for query strings; bad input yields ``default``."""
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def normalize_page(page: int, page_size: int, default_size: int) -> PageParams:
    """Clamp paging input: page < 1 becomes 1, an out-of-range size the default."""
    if page < 1:
        page = 1
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = default_size
    return PageParams(page=page, page_size=page_size)


def normalize_limit(limit: int, default: int, maximum: int) -> int:
    if limit < 1 or limit > maximum:
        return default
    return limit


def paginate(default_size: int) -> Callable[..., PageParams]:
    """Build a dependency that reads ``page``/``page_size`` from the query string."""

    def dependency(page: str | None = None, page_size: str | None = None) -> PageParams:
        return normalize_page(
            parse_int(page, 1),
            parse_int(page_size, default_size),
            default_size,
        )

    return dependency


Page10 = Annotated[PageParams, Depends(paginate(10))]
Page20 = Annotated[PageParams, Depends(paginate(20))]


# ============================================================================
# Services
# ============================================================================


def get_article_service(db: AsyncSession = Depends(get_db)) -> ArticleService:
    return SqlArticleService(db)


def get_comment_service(db: AsyncSession = Depends(get_db)) -> CommentService:
    return SqlCommentService(db)


def get_column_service(db: AsyncSession = Depends(get_db)) -> ColumnService:
    return SqlColumnService(db)


Articles = Annotated[ArticleService, Depends(get_article_service)]
Comments = Annotated[CommentService, Depends(get_comment_service)]
Columns = Annotated[ColumnService, Depends(get_column_service)]
