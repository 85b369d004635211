from .pages import router as pages_router
from .tools import router as tools_router
from .wave_hacks import router as wave_hacks_router

__all__ = ["pages_router", "tools_router", "wave_hacks_router"]
