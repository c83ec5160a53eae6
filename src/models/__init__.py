from src.models.deal import DealRecord

__all__ = [
    "DealRecord",
]
