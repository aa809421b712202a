from .guard import GasCheck, GasCheckStatus, GasGuard

__all__ = ["GasCheck", "GasCheckStatus", "GasGuard"]
