"""
Core application utilities for settings, logging, security and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Dependency helpers (DB session, current user, role checks)
- The in-process query cache shared by list endpoints
"""
