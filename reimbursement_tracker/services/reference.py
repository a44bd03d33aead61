import logging
from typing import Dict, List, Optional

from ..errors import DuplicateError, NotInitialized, ValidationError
from ..models import (
    DEFAULT_REFERENCE_ENTRIES,
    REFERENCE_HEADERS,
    REFERENCE_TABLE,
    REFERENCE_TYPE_VALUES,
    HeaderIndex,
    ReferenceEntry,
)
from ..stores import RowStoreBase

logger = logging.getLogger(__name__)


class ReferenceCatalog:
    """Whitelist of valid Source / BenefitType / ClaimType values."""

    def __init__(self, store: RowStoreBase):
        self.store = store

    def is_initialized(self) -> bool:
        return self.store.has_table(REFERENCE_TABLE) and self.store.row_count(REFERENCE_TABLE) > 0

    def initialize(self) -> str:
        """Create the catalog with its default entries unless it already holds data."""
        if self.is_initialized():
            return "ReferenceData sheet already exists with data"

        self.store.create_table(REFERENCE_TABLE, REFERENCE_HEADERS)
        idx = HeaderIndex(self.store.headers(REFERENCE_TABLE))
        for entry in DEFAULT_REFERENCE_ENTRIES:
            self.store.append_row(REFERENCE_TABLE, _entry_row(idx, entry))

        logger.info("Reference catalog initialized with %d entries", len(DEFAULT_REFERENCE_ENTRIES))
        return f"ReferenceData sheet initialized with {len(DEFAULT_REFERENCE_ENTRIES)} entries"

    def get_entries(self, type_filter: Optional[str] = None) -> List[ReferenceEntry]:
        if not self.is_initialized():
            raise NotInitialized(
                REFERENCE_TABLE,
                "ReferenceData sheet not found or empty. Use initReferenceData to create it.",
            )

        idx = HeaderIndex(self.store.headers(REFERENCE_TABLE))
        entries = []
        for row in self.store.read_rows(REFERENCE_TABLE):
            entry_type = str(idx.get(row, "Type"))
            if type_filter and entry_type != type_filter:
                continue
            entries.append(ReferenceEntry(
                type=entry_type,
                value=str(idx.get(row, "Value")),
                display_name=str(idx.get(row, "DisplayName") or ""),
                description=str(idx.get(row, "Description") or ""),
            ))
        return entries

    def grouped(self, type_filter: Optional[str] = None) -> Dict[str, List[ReferenceEntry]]:
        groups: Dict[str, List[ReferenceEntry]] = {}
        for entry in self.get_entries(type_filter):
            groups.setdefault(entry.type, []).append(entry)
        return groups

    def allowed_values(self) -> Optional[Dict[str, List[str]]]:
        """Values per type, or None when the catalog was never initialized."""
        try:
            groups = self.grouped()
        except NotInitialized:
            return None
        return {t: [e.value for e in entries] for t, entries in groups.items()}

    def add_entry(
        self,
        entry_type: Optional[str],
        value: Optional[str],
        display_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ReferenceEntry:
        if not entry_type:
            raise ValidationError("type is required (Source, BenefitType, or ClaimType)")
        if not value:
            raise ValidationError("value is required")
        if entry_type not in REFERENCE_TYPE_VALUES:
            raise ValidationError("Invalid type. Must be one of: " + ", ".join(REFERENCE_TYPE_VALUES))

        if not self.store.has_table(REFERENCE_TABLE):
            self.initialize()

        idx = HeaderIndex(self.store.headers(REFERENCE_TABLE))
        for row in self.store.read_rows(REFERENCE_TABLE):
            if idx.get(row, "Type") == entry_type and idx.get(row, "Value") == value:
                logger.warning("Reference entry already exists: %s=%s", entry_type, value)
                raise DuplicateError(f"Entry already exists: {entry_type} = {value}")

        entry = ReferenceEntry(
            type=entry_type,
            value=value,
            display_name=display_name or value,
            description=description or "",
        )
        self.store.append_row(REFERENCE_TABLE, _entry_row(idx, entry))
        logger.info("Reference entry added: %s=%s", entry_type, value)
        return entry


def _entry_row(idx: HeaderIndex, entry: ReferenceEntry) -> list:
    return idx.build_row({
        "Type": entry.type,
        "Value": entry.value,
        "DisplayName": entry.display_name,
        "Description": entry.description,
    })
