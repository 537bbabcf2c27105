"""zerotouch - Zero-touch deployment of campaign directories behind nginx.

Scans a campaigns root, classifies each campaign's structure, generates
nginx location blocks for the ones it can serve safely and reloads nginx
with rollback on failure.
"""

__version__ = "0.3.0"
