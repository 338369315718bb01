"""Business logic for categories."""

from typing import Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from app.core.exceptions import (
    CategoryCycleError,
    CategoryHasDependentsError,
    CategoryNameRequiredError,
    CategoryNotFoundError,
    ParentCategoryNotFoundError,
)
from app.core.metrics import record_business_event, time_db_query
from app.core.tracing import create_span
from app.db.models.category import Category
from app.db.models.product import Product
from app.schemas.categories import (
    CategoryDetailResponse,
    CategoryRef,
    CategoryResponse,
    CategoryTreeNode,
    CategoryWrite,
)
from app.services.category_tree import (
    build_category_tree,
    collect_descendant_ids,
    count_nodes,
    creates_cycle,
    filter_categories,
)

_child = aliased(Category)

PRODUCTS_COUNT = (
    select(func.count(Product.id)).where(Product.category_id == Category.id).correlate(Category).scalar_subquery()
)
CHILDREN_COUNT = (
    select(func.count(_child.id)).where(_child.parent_id == Category.id).correlate(Category).scalar_subquery()
)


def to_category_response(category: Category, products_count: int, children_count: int) -> CategoryResponse:
    """Project a loaded category row (with ``parent`` loaded) to its response."""
    parent = category.parent
    return CategoryResponse(
        id=category.id,
        name=category.name,
        parent_id=category.parent_id,
        parent=CategoryRef(id=parent.id, name=parent.name) if parent is not None else None,
        products_count=products_count or 0,
        children_count=children_count or 0,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def normalize_name(name: Optional[str]) -> str:
    """Trimmed category name; raises when nothing is left."""
    value = (name or "").strip()
    if not value:
        raise CategoryNameRequiredError()
    return value


class CategoryService:
    """Service for category-related operations."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db

    def _annotated_query(self) -> Select:
        return (
            select(Category, PRODUCTS_COUNT.label("products_count"), CHILDREN_COUNT.label("children_count"))
            .options(selectinload(Category.parent))
            .execution_options(populate_existing=True)
        )

    @time_db_query("select", "categories")
    async def list_categories(self) -> List[CategoryResponse]:
        """All categories, newest first, with direct product and child counts."""
        query = self._annotated_query().order_by(Category.created_at.desc())
        result = await self.db.execute(query)
        return [to_category_response(*row) for row in result.all()]

    async def get_tree(self, search: Optional[str] = None, only_roots: bool = False) -> List[CategoryTreeNode]:
        """Filtered categories arranged as a forest."""
        categories = await self.list_categories()
        with create_span("category.build_tree", {"category.count": len(categories)}) as span:
            forest = build_category_tree(filter_categories(categories, search, only_roots))
            span.set_attribute("category.tree_nodes", count_nodes(forest))
        return forest

    async def get_category(self, category_id: str) -> CategoryDetailResponse:
        """A category with children references and product IDs."""
        result = await self.db.execute(self._annotated_query().where(Category.id == category_id))
        row = result.one_or_none()
        if row is None:
            raise CategoryNotFoundError(category_id)

        children = await self.db.execute(
            select(Category.id, Category.name)
            .where(Category.parent_id == category_id)
            .order_by(Category.created_at.desc())
        )
        product_ids = await self.db.execute(
            select(Product.id).where(Product.category_id == category_id).order_by(Product.created_at.desc())
        )

        summary = to_category_response(*row)
        return CategoryDetailResponse(
            **summary.model_dump(),
            children=[CategoryRef(id=child_id, name=name) for child_id, name in children.all()],
            product_ids=list(product_ids.scalars().all()),
        )

    async def _require_parent(self, parent_id: str) -> None:
        exists = await self.db.scalar(select(Category.id).where(Category.id == parent_id))
        if exists is None:
            logger.warning(f"Parent category {parent_id} not found")
            raise ParentCategoryNotFoundError(parent_id)

    async def _parent_map(self) -> Dict[str, Optional[str]]:
        result = await self.db.execute(select(Category.id, Category.parent_id))
        return {category_id: parent_id for category_id, parent_id in result.all()}

    async def _direct_counts(self, category_id: str) -> Tuple[int, int]:
        products_count = await self.db.scalar(select(func.count(Product.id)).where(Product.category_id == category_id))
        children_count = await self.db.scalar(
            select(func.count(Category.id)).where(Category.parent_id == category_id)
        )
        return products_count or 0, children_count or 0

    async def create_category(self, data: CategoryWrite) -> CategoryDetailResponse:
        """Create a category under an optional, existing parent."""
        name = normalize_name(data.name)
        if data.parent_id:
            await self._require_parent(data.parent_id)

        category = Category(name=name, parent_id=data.parent_id)
        self.db.add(category)
        try:
            await self.db.commit()
        except IntegrityError:
            # Parent removed between the check and the insert
            await self.db.rollback()
            raise ParentCategoryNotFoundError(str(data.parent_id)) from None

        logger.info(f"Created category {category.id} ({name!r}) under parent {category.parent_id}")
        record_business_event("category_created")
        return await self.get_category(category.id)

    async def update_category(self, category_id: str, data: CategoryWrite) -> CategoryDetailResponse:
        """Rename and/or reparent a category; rejects parents that would form a cycle."""
        category = await self.db.get(Category, category_id)
        if category is None:
            logger.warning(f"Category {category_id} not found for update")
            raise CategoryNotFoundError(category_id)

        name = normalize_name(data.name)
        new_parent_id = data.parent_id
        if new_parent_id:
            await self._require_parent(new_parent_id)
            parent_map = await self._parent_map()
            if creates_cycle(parent_map, category_id, new_parent_id):
                logger.warning(f"Rejected reparenting category {category_id} under descendant {new_parent_id}")
                raise CategoryCycleError(category_id, new_parent_id)
            if parent_map.get(category_id) != new_parent_id:
                descendants = collect_descendant_ids(parent_map, category_id)
                logger.info(f"Moving category {category_id} and {len(descendants)} descendants under {new_parent_id}")

        category.name = name
        category.parent_id = new_parent_id
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ParentCategoryNotFoundError(str(new_parent_id)) from None

        logger.info(f"Updated category {category_id} ({name!r}), parent {new_parent_id}")
        record_business_event("category_updated")
        return await self.get_category(category_id)

    async def delete_category(self, category_id: str) -> None:
        """
        Delete a category that has neither products nor subcategories.

        The dependency check and the delete run in one transaction with the
        row locked; a foreign key rejection raised by a concurrent product
        insert is reported as the same dependency error.
        """
        with create_span("category.delete", {"category.id": category_id}) as span:
            result = await self.db.execute(select(Category.id).where(Category.id == category_id).with_for_update())
            if result.scalar_one_or_none() is None:
                raise CategoryNotFoundError(category_id)

            products_count, children_count = await self._direct_counts(category_id)
            if products_count or children_count:
                await self.db.rollback()
                logger.warning(
                    f"Refused to delete category {category_id}: "
                    f"{products_count} products, {children_count} children"
                )
                record_business_event("category_delete_blocked")
                raise CategoryHasDependentsError(category_id, products_count, children_count)

            try:
                await self.db.execute(delete(Category).where(Category.id == category_id))
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                products_count, children_count = await self._direct_counts(category_id)
                logger.warning(f"Foreign key rejected delete of category {category_id}")
                record_business_event("category_delete_blocked")
                raise CategoryHasDependentsError(category_id, products_count, children_count) from None

            span.add_event("category_deleted")

        logger.info(f"Deleted category {category_id}")
        record_business_event("category_deleted")
