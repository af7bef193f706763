"""
Feature modules for the Solutil backend.

- auth: credential verification, identity resolution, admin login
- access: role/permission/ownership guards
- ratelimit: sliding-window attempt limiter
- verification: provider application lifecycle

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- service.py: Business logic implementation
- routes.py: FastAPI route handlers (where the module has an HTTP surface)
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
"""
