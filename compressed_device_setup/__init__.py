"""LZ4 compressed-device provisioning for Linux hosts.

Core design goals:
- One linear pipeline, fail fast on the first error
- Every external tool behind a single command runner
- Pinned LZ4 release built from source and verified
- Centralized logging (console, log file, syslog)
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
