from __future__ import annotations

from receptionist.domain.entities.service_catalog import ServiceCatalogEntry

_ENTRIES = (
    ServiceCatalogEntry("haircut", "haircut", 45, ("haircut", "hair cut", "trim", "cut")),
    ServiceCatalogEntry("hair_color", "hair color", 120, ("hair color", "hair colour", "coloring", "colouring", "highlights", "balayage")),
    ServiceCatalogEntry("blowout", "blowout", 45, ("blowout", "blow dry", "blow-dry")),
    ServiceCatalogEntry("beard_trim", "beard trim", 30, ("beard trim", "shave", "beard")),
    ServiceCatalogEntry("manicure", "manicure", 45, ("manicure", "nails", "gel nails")),
    ServiceCatalogEntry("pedicure", "pedicure", 60, ("pedicure",)),
    ServiceCatalogEntry("massage", "massage", 60, ("massage", "deep tissue", "swedish massage")),
    ServiceCatalogEntry("facial", "facial", 60, ("facial",)),
    ServiceCatalogEntry("waxing", "waxing", 30, ("waxing", "wax")),
    ServiceCatalogEntry("consultation", "consultation", 30, ("consultation", "consult")),
)

SERVICE_CATALOG: dict[str, ServiceCatalogEntry] = {entry.service_key: entry for entry in _ENTRIES}
