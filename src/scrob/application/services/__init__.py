"""Application services."""

from scrob.application.services.aggregation_service import AggregationService
from scrob.application.services.credential_store import CredentialStore
from scrob.application.services.ingestion_service import IngestionService
from scrob.application.services.session_resolver import SessionResolver, parse_bearer_token
from scrob.application.services.token_ledger import TokenLedger, hash_token

__all__ = [
    "AggregationService",
    "CredentialStore",
    "IngestionService",
    "SessionResolver",
    "TokenLedger",
    "hash_token",
    "parse_bearer_token",
]
