"""minerdash -- Monitoring and control proxy for cgminer-based ASIC miners.

This package talks to the miner daemon's line-delimited JSON API over a
raw TCP socket and exposes the result as an HTTP/JSON API that a
dashboard can poll for summary, device and pool state, and post to for
pool and device changes.
"""

__version__ = "0.1.0"
