from .bom import BOMCommandSerializer, BOMItemInputSerializer, BOMSerializer
from .production import (
    ProductionCommandSerializer,
    ProductionInputSerializer,
    ProductionSerializer,
)

__all__ = [
    "BOMCommandSerializer",
    "BOMItemInputSerializer",
    "BOMSerializer",
    "ProductionCommandSerializer",
    "ProductionInputSerializer",
    "ProductionSerializer",
]
