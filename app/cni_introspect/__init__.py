"""
CNI introspection server.

Exposes read-only JSON snapshots of ENI, pod and configuration state over
HTTP for operators and metrics scrapers.
"""

__version__ = "0.1.0"
