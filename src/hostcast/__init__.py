"""hostcast - Run one shell command across an inventory-selected fleet.

Resolves target hosts from a Collins-style inventory selector (or a host
list piped on stdin), confirms with the operator, and hands a single batch
request to a func-style remote execution backend.

Quick Start:
    hostcast -s "status:allocated pool:web" uptime
    grep -v db hosts.txt | hostcast -i -- df -h /
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
