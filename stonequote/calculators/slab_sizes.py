"""
Standard slab sizes by material family.

A material can carry its own slab_length_mm / slab_width_mm; when it
doesn't, its category (brand or stone family) picks one of these. Unknown
categories fall back to the jumbo engineered-quartz slab.

Only the workable part of a slab counts: the edge trim comes off every
side before a piece is laid out or a group's area is divided into slabs.
"""

import logging
import re

logger = logging.getLogger(__name__)

# Full slab sizes, before edge trim
SLAB_SIZES = {
    "ENGINEERED_QUARTZ_JUMBO": {"length_mm": 3200, "width_mm": 1600,
                                "name": "Engineered Quartz (Jumbo)"},
    "ENGINEERED_QUARTZ_STANDARD": {"length_mm": 3050, "width_mm": 1440,
                                   "name": "Engineered Quartz (Standard)"},
    "NATURAL_STONE": {"length_mm": 2800, "width_mm": 1600, "name": "Natural Stone"},
    "PORCELAIN": {"length_mm": 3200, "width_mm": 1600, "name": "Porcelain"},
}

DEFAULT_SLAB = "ENGINEERED_QUARTZ_JUMBO"
DEFAULT_EDGE_TRIM_MM = 20

CATEGORY_SLABS = {
    "caesarstone": "ENGINEERED_QUARTZ_JUMBO",
    "silestone": "ENGINEERED_QUARTZ_JUMBO",
    "smartstone": "ENGINEERED_QUARTZ_JUMBO",
    "essastone": "ENGINEERED_QUARTZ_STANDARD",
    "granite": "NATURAL_STONE",
    "marble": "NATURAL_STONE",
    "quartzite": "NATURAL_STONE",
    "porcelain": "PORCELAIN",
    "dekton": "PORCELAIN",
    "neolith": "PORCELAIN",
}


def slab_key_for_category(category: str = None) -> str:
    """'Caesar-Stone' and 'caesarstone' map to the same slab."""
    if not category:
        return DEFAULT_SLAB
    normalised = re.sub(r"[^a-z]", "", category.lower())
    key = CATEGORY_SLABS.get(normalised)
    if key is None:
        logger.warning("Unknown material category '%s', assuming %s slab", category, DEFAULT_SLAB)
        return DEFAULT_SLAB
    return key


def slab_dimensions(material) -> tuple:
    """(length_mm, width_mm) of a full slab of this material."""
    if material.slab_length_mm and material.slab_width_mm:
        return float(material.slab_length_mm), float(material.slab_width_mm)
    size = SLAB_SIZES[slab_key_for_category(material.category)]
    return float(size["length_mm"]), float(size["width_mm"])


def workable_dimensions(length_mm: float, width_mm: float,
                        edge_trim_mm: float = DEFAULT_EDGE_TRIM_MM) -> tuple:
    """Usable area of a slab once the edge trim comes off every side."""
    return length_mm - 2 * edge_trim_mm, width_mm - 2 * edge_trim_mm


def workable_slab_dimensions(material, edge_trim_mm: float = DEFAULT_EDGE_TRIM_MM) -> tuple:
    """(max_length_mm, max_width_mm) a single piece of this material can be cut to."""
    return workable_dimensions(*slab_dimensions(material), edge_trim_mm)


def workable_area_sqm(material, edge_trim_mm: float = DEFAULT_EDGE_TRIM_MM) -> float:
    length_mm, width_mm = workable_slab_dimensions(material, edge_trim_mm)
    return max(0.0, length_mm) * max(0.0, width_mm) / 1_000_000
