"""ASGI edge and development server."""
