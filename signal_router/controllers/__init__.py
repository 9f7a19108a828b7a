"""FastAPI routers acting as controllers in the MVC architecture."""

from . import recommend

__all__ = ["recommend"]
