"""Bugwatch Core - tenant-scoped CRUD for an error tracking service.

Modules:
- controllers: repository-backed create / patch / delete pipeline
- permissions: organization ownership checks
- patching: partial updates
- bulk: multi-id operations and their aggregate results
- work_items: background work started by deletes
- api: FastAPI application
"""

__version__ = "1.0.0"
