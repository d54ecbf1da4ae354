from .purchase import PurchaseCommandSerializer, PurchaseSerializer

__all__ = ["PurchaseCommandSerializer", "PurchaseSerializer"]
