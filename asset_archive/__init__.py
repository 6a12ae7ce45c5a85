"""
Asset Archive - retention lifecycle core for digital assets.

Tracks documents and videos through a compliance archival lifecycle:
queued, classified with an integrity fingerprint, then monitored for
tampering, disappearance, or renewed use. Files never leave their
original storage location; archiving is a classification, not a move.

Operating truths:
- The classification timestamp is the legal decision point
- A checksum is only evidence while it is immutable
- Integrity that cannot be proven is treated as violated
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
