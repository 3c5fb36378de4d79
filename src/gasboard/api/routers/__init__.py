"""API routers package."""

from gasboard.api.routers.gas_data import router as gas_data_router

__all__ = [
    "gas_data_router",
]
