"""
Endpoint subpackage.

Each module in this package defines an APIRouter for a specific
domain (users, messages, realtime).  The routers are aggregated in
``api/router.py`` and then included in the main application.
"""
