"""Extraction and categorization collaborators."""

from ctfiling.integrations.base import DocumentExtractor, TransactionCategorizer
from ctfiling.integrations.files import JsonDocumentExtractor, KeywordCategorizer

__all__ = [
    "DocumentExtractor",
    "TransactionCategorizer",
    "JsonDocumentExtractor",
    "KeywordCategorizer",
]
