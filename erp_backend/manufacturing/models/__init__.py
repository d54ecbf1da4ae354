"""
PATH: manufacturing/models/__init__.py

Manufacturing models export surface.
"""

from .bom import BOM, BOMItem
from .production import Production, ProductionInput

__all__ = [
    "BOM",
    "BOMItem",
    "Production",
    "ProductionInput",
]
