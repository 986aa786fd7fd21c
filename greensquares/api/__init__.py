"""API routers."""

from greensquares.api.router import api_router, oauth_browser_router

__all__ = ["api_router", "oauth_browser_router"]
