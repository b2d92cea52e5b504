"""
FastAPI dependencies for authentication and database sessions.
"""

import uuid
from typing import Annotated, List, Optional

from fastapi import Depends, HTTPException, Request, UploadFile, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.config import get_settings
from thesis_tracker.database import get_db
from thesis_tracker.engines.admission.submission_service import IncomingFile
from thesis_tracker.kernel.errors import BadRequest
from thesis_tracker.kernel.identity.jwt import verify_access_token
from thesis_tracker.kernel.models.account import Account


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_account(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> Account:
    """Get the account behind the bearer token or raise 401."""
    if not credentials:
        raise _unauthorized("Not authenticated")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    try:
        account_id = uuid.UUID(payload.sub)
    except ValueError:
        raise _unauthorized("Invalid or expired token")

    account = await db.get(Account, account_id)
    if not account:
        raise _unauthorized("Account not found")

    if not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    return account


CurrentAccount = Annotated[Account, Depends(get_current_account)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def read_uploads(files: Optional[List[UploadFile]]) -> List[IncomingFile]:
    """
    Read multipart uploads into memory, skipping empty file fields.

    Count and declared sizes are checked before any payload is read.
    """
    settings = get_settings()
    uploads = [u for u in files or [] if u.filename]
    if len(uploads) > settings.max_upload_files:
        raise BadRequest(f"At most {settings.max_upload_files} files can be submitted at once.")

    limit = settings.max_upload_size_mb * 1024 * 1024
    for upload in uploads:
        if upload.size is not None and upload.size > limit:
            raise BadRequest(f"File '{upload.filename}' exceeds {settings.max_upload_size_mb} MB.")

    incoming = []
    for upload in uploads:
        incoming.append(
            IncomingFile(
                original_name=upload.filename,
                mime=upload.content_type or "application/octet-stream",
                data=await upload.read(),
            )
        )
    return incoming
