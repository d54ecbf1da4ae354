from .sale import SaleCommandSerializer, SaleSerializer

__all__ = ["SaleCommandSerializer", "SaleSerializer"]
