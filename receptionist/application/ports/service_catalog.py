from __future__ import annotations

from abc import ABC, abstractmethod

from receptionist.domain.entities.service_catalog import ServiceCatalogEntry


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_key: str) -> ServiceCatalogEntry | None:
        """Get service catalog entry by service key or alias."""
        raise NotImplementedError

    @abstractmethod
    def match_service(self, text: str) -> ServiceCatalogEntry | None:
        """Find the service mentioned in free text. Longest alias wins."""
        raise NotImplementedError

    @abstractmethod
    def get_duration_minutes(self, service: str) -> int | None:
        """Get the usual duration for a service. Returns None if unknown."""
        raise NotImplementedError

    @abstractmethod
    def list_services(self) -> list[ServiceCatalogEntry]:
        raise NotImplementedError
