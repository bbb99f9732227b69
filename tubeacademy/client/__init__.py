from .api import CatalogAPI, CatalogAPIError

__all__ = ["CatalogAPI", "CatalogAPIError"]
