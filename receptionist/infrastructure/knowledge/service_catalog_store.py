from __future__ import annotations

import re

from receptionist.application.ports.service_catalog import ServiceCatalogPort
from receptionist.domain.entities.service_catalog import ServiceCatalogEntry
from receptionist.infrastructure.knowledge.service_catalog_data import SERVICE_CATALOG


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, ServiceCatalogEntry] | None = None) -> None:
        self._catalog = catalog or SERVICE_CATALOG
        self._aliases: list[tuple[str, ServiceCatalogEntry]] = sorted(
            (
                (alias.lower(), entry)
                for entry in self._catalog.values()
                for alias in (entry.display_name, *entry.aliases)
            ),
            key=lambda item: len(item[0]),
            reverse=True,
        )

    def get_service(self, service_key: str) -> ServiceCatalogEntry | None:
        normalized_key = service_key.lower().strip()
        entry = self._catalog.get(normalized_key.replace(" ", "_"))
        if entry:
            return entry
        for alias, candidate in self._aliases:
            if alias == normalized_key:
                return candidate
        return None

    def match_service(self, text: str) -> ServiceCatalogEntry | None:
        normalized = text.lower()
        for alias, entry in self._aliases:
            # plural forms ("massages", "facials") count as a mention
            if re.search(rf"\b{re.escape(alias)}(?:s|es)?\b", normalized):
                return entry
        return None

    def get_duration_minutes(self, service: str) -> int | None:
        entry = self.get_service(service)
        if not entry:
            return None
        return entry.duration_minutes

    def list_services(self) -> list[ServiceCatalogEntry]:
        return list(self._catalog.values())
