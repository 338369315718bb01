"""
FastAPI API dependencies.
"""

from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import session_scope
from app.services.categories import CategoryService
from app.services.products import ProductService


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting an async database session.

    Sessions come from the factory opened in the application lifespan; the
    session is committed when the request succeeds and rolled back otherwise.
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database is not available")

    async for session in session_scope(session_factory):
        yield session


def get_category_service(db: AsyncSession = Depends(get_db_session)) -> CategoryService:
    """Category service bound to the request session."""
    return CategoryService(db)


def get_product_service(db: AsyncSession = Depends(get_db_session)) -> ProductService:
    """Product service bound to the request session."""
    return ProductService(db)
