"""
Web — JSON endpoints for storefront front ends.

    from vitrina.web import create_app
    app = create_app()
"""

from vitrina.web._app import create_app

__all__ = ("create_app",)
