"""Vault loading and parsing utilities."""

from .loader import Vault, build_source_expression, load_vault, parse_source_expression
from .parser import extract_inline_fields, extract_outlinks, extract_tags, parse_list_items

__all__ = [
    "load_vault",
    "Vault",
    "build_source_expression",
    "parse_source_expression",
    "extract_inline_fields",
    "extract_outlinks",
    "extract_tags",
    "parse_list_items",
]
