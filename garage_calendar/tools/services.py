"""Garage service catalog with durations, prices, and descriptions."""

import logging
from typing import Optional, TypedDict

logger = logging.getLogger(__name__)


class ServiceInfo(TypedDict):
    """A bookable garage service."""

    id: str
    name: str
    description: str
    category: str
    duration: int
    price: float


SERVICE_CATALOG: dict[str, ServiceInfo] = {
    "oil-change": {
        "id": "oil-change",
        "name": "Oil & Filter Change",
        "description": "Drain engine oil, replace oil filter, and refill to the manufacturer's grade.",
        "category": "maintenance",
        "duration": 30,
        "price": 79.0,
    },
    "interim-service": {
        "id": "interim-service",
        "name": "Interim Service",
        "description": "Oil change plus fluid top-ups, lights, tyres and brake checks.",
        "category": "maintenance",
        "duration": 60,
        "price": 149.0,
    },
    "full-service": {
        "id": "full-service",
        "name": "Full Service",
        "description": "Manufacturer-schedule service including filters and plugs.",
        "category": "maintenance",
        "duration": 120,
        "price": 259.0,
    },
    "mot": {
        "id": "mot",
        "name": "MOT Test",
        "description": "Annual roadworthiness test.",
        "category": "inspection",
        "duration": 45,
        "price": 54.85,
    },
    "brake-pads": {
        "id": "brake-pads",
        "name": "Brake Pad Replacement",
        "description": "Replace front or rear brake pads and inspect discs.",
        "category": "repair",
        "duration": 60,
        "price": 120.0,
    },
    "tyre-fitting": {
        "id": "tyre-fitting",
        "name": "Tyre Fitting",
        "description": "Fit and balance up to four tyres.",
        "category": "tyres",
        "duration": 30,
        "price": 40.0,
    },
    "diagnostics": {
        "id": "diagnostics",
        "name": "Engine Diagnostics",
        "description": "OBD fault code read and diagnosis.",
        "category": "diagnosis",
        "duration": 45,
        "price": 65.0,
    },
    "health-check": {
        "id": "health-check",
        "name": "Vehicle Health Check",
        "description": "Multi-point visual inspection with written report.",
        "category": "inspection",
        "duration": 15,
        "price": 0.0,
    },
}

SERVICE_ALIASES: dict[str, str] = {
    "oil": "oil-change", "filter": "oil-change",
    "interim": "interim-service", "full": "full-service", "major": "full-service",
    "mot test": "mot", "brakes": "brake-pads", "pads": "brake-pads",
    "tyres": "tyre-fitting", "tires": "tyre-fitting",
    "diagnostic": "diagnostics", "engine light": "diagnostics",
    "vhc": "health-check", "inspection": "health-check",
}


def get_all_services() -> list[ServiceInfo]:
    """Return all catalog services."""
    return list(SERVICE_CATALOG.values())


def get_service(service_id: str) -> Optional[ServiceInfo]:
    """Look up a service by exact id."""
    return SERVICE_CATALOG.get(service_id)


def total_duration(service_ids: list[str]) -> int:
    """Combined duration in minutes of the given services. Unknown ids count as 0."""
    total = 0
    for sid in service_ids:
        info = SERVICE_CATALOG.get(sid)
        if info is None:
            logger.warning("Unknown service id: %s", sid)
            continue
        total += info["duration"]
    return total


def match_service(query: str) -> Optional[str]:
    """Match a free-text query to a service id. Returns None if no match."""
    normalized = query.lower().strip()
    if not normalized:
        return None
    if normalized in SERVICE_CATALOG:
        return normalized
    for alias, service_id in SERVICE_ALIASES.items():
        if alias in normalized:
            return service_id
    for sid, info in SERVICE_CATALOG.items():
        if normalized in info["name"].lower():
            return sid
    return None
