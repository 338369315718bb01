"""
Internationalization (i18n) support for API responses.

Error messages are looked up by key and rendered in the language negotiated
from the Accept-Language header.
"""

from enum import Enum
from typing import Dict, Optional

from fastapi import Request
from loguru import logger


class SupportedLanguage(str, Enum):
    """Supported languages for translation."""

    ENGLISH = "en"
    RUSSIAN = "ru"

    @classmethod
    def get_default(cls) -> "SupportedLanguage":
        """Get default language."""
        return cls.ENGLISH


TRANSLATIONS: Dict[SupportedLanguage, Dict[str, str]] = {
    SupportedLanguage.ENGLISH: {
        # Generic
        "ValidationError": "Validation error occurred. Please check your input data.",
        "InternalError": "An internal server error occurred. Please try again later.",
        "DatabaseError": "A database error occurred. Please try again later.",
        "IntegrityConflict": "The operation conflicts with existing data.",
        # Categories
        "CategoryNameRequired": "Category name is required.",
        "ParentCategoryNotFound": "Parent category {parent_id} was not found.",
        "CategoryNotFound": "Category {category_id} was not found.",
        "CategoryCycle": "Category {parent_id} cannot become the parent of {category_id}: "
        "a category cannot be its own ancestor.",
        "CategoryHasDependents": "Category {category_id} cannot be deleted: "
        "it has {products_count} product(s) and {children_count} subcategory(ies).",
        # Products
        "ProductNameRequired": "Product name is required.",
        "ProductCategoryRequired": "Product category is required.",
        "ProductCategoryNotFound": "Category {category_id} was not found.",
        "ProductVariantsRequired": "A product must have at least one variant.",
        "ProductVariantInvalid": "Variant {index}: size, color, a positive price and a non-negative quantity "
        "are required.",
        "ProductNotFound": "Product {product_id} was not found.",
        "ProductInUse": "Product {product_id} has variants referenced by existing orders.",
    },
    SupportedLanguage.RUSSIAN: {
        "ValidationError": "Ошибка валидации. Проверьте введённые данные.",
        "InternalError": "Внутренняя ошибка сервера. Попробуйте позже.",
        "DatabaseError": "Ошибка базы данных. Попробуйте позже.",
        "IntegrityConflict": "Операция конфликтует с существующими данными.",
        "CategoryNameRequired": "Название категории обязательно.",
        "ParentCategoryNotFound": "Родительская категория {parent_id} не найдена.",
        "CategoryNotFound": "Категория {category_id} не найдена.",
        "CategoryCycle": "Категория {parent_id} не может стать родителем {category_id}: "
        "категория не может быть собственным предком.",
        "CategoryHasDependents": "Категорию {category_id} нельзя удалить: "
        "товаров {products_count}, подкатегорий {children_count}.",
        "ProductNameRequired": "Название товара обязательно.",
        "ProductCategoryRequired": "Категория товара обязательна.",
        "ProductCategoryNotFound": "Категория {category_id} не найдена.",
        "ProductVariantsRequired": "Должен быть хотя бы один вариант товара.",
        "ProductVariantInvalid": "Вариант {index}: размер, цвет, цена больше нуля и неотрицательное количество "
        "обязательны.",
        "ProductNotFound": "Товар {product_id} не найден.",
        "ProductInUse": "Варианты товара {product_id} используются в существующих заказах.",
    },
}


def get_preferred_language(request: Request) -> SupportedLanguage:
    """
    Extract the preferred language from the Accept-Language header.

    Exact matches win over base-language matches ("ru-RU" falls back to "ru").
    """
    accept_language = request.headers.get("Accept-Language", "")

    if accept_language:
        languages = [lang.split(";")[0].strip() for lang in accept_language.split(",")]

        for lang in languages:
            try:
                return SupportedLanguage(lang)
            except ValueError:
                pass

        for lang in languages:
            base_lang = lang.split("-")[0]
            try:
                return SupportedLanguage(base_lang)
            except ValueError:
                pass

    return SupportedLanguage.get_default()


def get_translated_message(
    message_key: str,
    placeholders: Optional[Dict[str, str]] = None,
    language: Optional[SupportedLanguage] = None,
) -> str:
    """
    Get a translated message for the given key and language.

    Unknown keys fall back to the default language, then to the key itself.
    """
    lang = language or SupportedLanguage.get_default()
    placeholders = placeholders or {}

    translations = TRANSLATIONS.get(lang, TRANSLATIONS[SupportedLanguage.get_default()])
    template = translations.get(
        message_key, TRANSLATIONS[SupportedLanguage.get_default()].get(message_key, message_key)
    )

    try:
        return template.format(**placeholders)
    except KeyError as e:
        logger.warning(f"Missing placeholder {e} in translation for {message_key}")
        return template
