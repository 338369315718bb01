"""
Domain errors raised by the catalog services.

Each error carries a translation key (see ``app.api.i18n``) and the HTTP
status it maps to; the API layer renders them in the caller's language.
"""

from typing import Any, Dict, Optional

from fastapi import status


class CatalogError(Exception):
    """Base class for user-facing catalog errors."""

    message_key = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, placeholders: Optional[Dict[str, Any]] = None, message_key: Optional[str] = None):
        self.placeholders = {k: str(v) for k, v in (placeholders or {}).items()}
        if message_key is not None:
            self.message_key = message_key
        super().__init__(self.message_key)

    def extra_content(self) -> Dict[str, Any]:
        """Additional fields merged into the error response body."""
        return {}


class CategoryNameRequiredError(CatalogError):
    message_key = "CategoryNameRequired"


class ParentCategoryNotFoundError(CatalogError):
    message_key = "ParentCategoryNotFound"

    def __init__(self, parent_id: str):
        super().__init__({"parent_id": parent_id})


class CategoryCycleError(CatalogError):
    message_key = "CategoryCycle"

    def __init__(self, category_id: str, parent_id: str):
        super().__init__({"category_id": category_id, "parent_id": parent_id})


class CategoryNotFoundError(CatalogError):
    message_key = "CategoryNotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, category_id: str):
        super().__init__({"category_id": category_id})


class CategoryHasDependentsError(CatalogError):
    """Delete rejected because products or subcategories still reference the category."""

    message_key = "CategoryHasDependents"

    def __init__(self, category_id: str, products_count: int, children_count: int):
        self.products_count = products_count
        self.children_count = children_count
        super().__init__(
            {
                "category_id": category_id,
                "products_count": products_count,
                "children_count": children_count,
            }
        )

    def extra_content(self) -> Dict[str, Any]:
        return {"blockers": {"products": self.products_count, "children": self.children_count}}


class ProductValidationError(CatalogError):
    message_key = "ProductInvalid"


class ProductNotFoundError(CatalogError):
    message_key = "ProductNotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, product_id: str):
        super().__init__({"product_id": product_id})


class ProductInUseError(CatalogError):
    """A product variant is referenced by an order line and cannot be removed."""

    message_key = "ProductInUse"

    def __init__(self, product_id: str, order_items_count: Optional[int] = None):
        self.order_items_count = order_items_count
        super().__init__({"product_id": product_id})

    def extra_content(self) -> Dict[str, Any]:
        if self.order_items_count is None:
            return {}
        return {"blockers": {"orderItems": self.order_items_count}}
