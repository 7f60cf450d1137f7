"""Normalization helpers for catalog names and identifier codes"""
from typing import Optional
import re


class CatalogNormalizer:
    """Canonical forms used when comparing names and codes"""

    @staticmethod
    def clean_text(value: Optional[str]) -> str:
        """Trim and collapse internal whitespace"""
        if not value:
            return ""
        return re.sub(r'\s+', ' ', value.strip())

    @staticmethod
    def normalize_ingredient_name(name: Optional[str]) -> str:
        """
        Collation key for the ingredient dictionary.
        "Brown  Rice", "brown rice" and " BROWN RICE" share one key.
        """
        return CatalogNormalizer.clean_text(name).casefold()

    @staticmethod
    def normalize_product_name(name: Optional[str]) -> str:
        """Lowercased product name used for fuzzy scoring"""
        return CatalogNormalizer.clean_text(name).lower()

    @staticmethod
    def normalize_identifier_type(identifier_type: Optional[str]) -> str:
        return CatalogNormalizer.clean_text(identifier_type).upper()

    @staticmethod
    def normalize_identifier_value(value: Optional[str]) -> str:
        # Codes are matched exactly, so only surrounding whitespace is dropped
        return (value or "").strip()
