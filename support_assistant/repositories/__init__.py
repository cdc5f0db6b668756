"""Repository implementations for secrets and the record store."""

from .airtable import AirtableRecordStore, equals_formula
from .base import BaseSecretRepository
from .gcp import GCPSecretRepository
from .local import LocalRecordStore, LocalSecretRepository
from .records import RecordRepository

__all__ = [
    "AirtableRecordStore",
    "BaseSecretRepository",
    "GCPSecretRepository",
    "LocalRecordStore",
    "LocalSecretRepository",
    "RecordRepository",
    "equals_formula",
]
