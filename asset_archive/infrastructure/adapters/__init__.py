"""Production adapters.

- filesystem: Local public/private file storage and URL-to-stream-URI mapping
- persistence: PostgreSQL repositories and checksum queue (SQLAlchemy async)
"""
