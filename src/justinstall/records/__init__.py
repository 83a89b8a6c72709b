"""Installation records: what was installed, from where, and how."""

from justinstall.records.store import (
    InstallationRecord,
    InstallationStore,
    RecordStoreError,
    build_record,
    extract_name,
    hash_file,
)

__all__ = [
    "InstallationRecord",
    "InstallationStore",
    "RecordStoreError",
    "build_record",
    "extract_name",
    "hash_file",
]
