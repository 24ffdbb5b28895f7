"""
Domain Layer

Pure business logic: address validation, job lifecycle, admission control
and file naming rules. No Flask, requests or filesystem access lives here
apart from DNS lookups made by the address guard.
"""
