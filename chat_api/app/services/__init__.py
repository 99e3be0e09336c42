"""
Service layer abstraction.

Each service encapsulates business logic for a domain.  Services are
constructed with the document collection they work on, so the store
can be swapped without changing API handlers.
"""
