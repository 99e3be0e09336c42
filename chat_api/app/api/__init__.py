"""
API package containing the HTTP and WebSocket routes.

``router.py`` exposes a top-level ``router`` which includes the
domain-specific routers defined in ``endpoints``.
"""
