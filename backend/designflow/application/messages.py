"""User-facing message catalog for pipeline views."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "id"

MESSAGES: Dict[str, Dict[str, str]] = {
    "id": {
        "fetch_failed": "Gagal memuat data desain.",
        "status_failed": "Gagal memperbarui status.",
        "briefing_failed": "Gagal memperbarui briefing.",
        "seen_failed": "Gagal menandai briefing.",
        "upload_failed": "Gagal mengunggah file.",
        "current_read_failed": "Gagal mengambil data desain saat ini.",
        "deliverable_link_failed": "Gagal memperbarui database dengan URL file.",
        "deliverable_delete_failed": "Gagal menghapus file hasil desain.",
        "reference_unresolved": "Referensi file tidak dikenali.",
        "title.new": "Desain Baru",
        "title.revision": "Desain Revisi",
        "title.completed": "Desain Selesai",
        "empty.new": "Tidak ada desain baru.",
        "empty.revision": "Tidak ada desain revisi.",
        "empty.completed": "Tidak ada desain selesai.",
    },
    "en": {
        "fetch_failed": "Failed to load design data.",
        "status_failed": "Failed to update status.",
        "briefing_failed": "Failed to update briefing.",
        "seen_failed": "Failed to mark briefing as seen.",
        "upload_failed": "Failed to upload file.",
        "current_read_failed": "Failed to read the current design data.",
        "deliverable_link_failed": "Failed to update the database with the file URL.",
        "deliverable_delete_failed": "Failed to delete the deliverable file.",
        "reference_unresolved": "File reference not recognised.",
        "title.new": "New Designs",
        "title.revision": "Revision Designs",
        "title.completed": "Completed Designs",
        "empty.new": "No new designs.",
        "empty.revision": "No designs in revision.",
        "empty.completed": "No completed designs.",
    },
}


@dataclass(frozen=True)
class MessageCatalog:
    locale: str = DEFAULT_LOCALE

    def get(self, key: str) -> str:
        table = MESSAGES.get(self.locale)
        if table is None:
            logger.warning("Unknown message locale", extra={"locale": self.locale})
            table = MESSAGES[DEFAULT_LOCALE]
        try:
            return table[key]
        except KeyError:
            return MESSAGES[DEFAULT_LOCALE].get(key, key)

    def title(self, view_key: str) -> str:
        return self.get(f"title.{view_key}")

    def empty_state(self, view_key: str) -> str:
        return self.get(f"empty.{view_key}")
