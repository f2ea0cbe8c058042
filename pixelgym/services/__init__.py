from .record_store import RecordStore, get_record_store
from .identity import IdentityService, get_identity_service
from .blob_store import BlobStore, get_blob_store

__all__ = [
    "RecordStore", "get_record_store",
    "IdentityService", "get_identity_service",
    "BlobStore", "get_blob_store",
]
