"""
Application layer - Use cases and orchestration for the archive lifecycle.

This layer contains:
- Lifecycle, reconciliation and checksum services
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, workers
"""
