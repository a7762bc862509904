"""ReleaseVault Shared Module.

This package contains shared error types, logging helpers and protocols used across ReleaseVault.
"""

__all__ = ["errors", "logging", "protocols"]
