# vidtube/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Startup reconciliation (counters, pending asset deletions)
- db: Database configuration and connection management
- errors: ApiError hierarchy and the error envelope handlers
- ids: 24-hex entity identifiers
- responses: Success envelope
- security: Password hashing and access/refresh tokens
"""
