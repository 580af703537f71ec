from ingestion.loaders.upsert_store import UpsertStore, UpsertResult, upsert_row
from ingestion.loaders.snapshot import save_snapshot, hash_payload

__all__ = ["UpsertStore", "UpsertResult", "upsert_row", "save_snapshot", "hash_payload"]
