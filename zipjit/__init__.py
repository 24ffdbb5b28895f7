"""
ZipJIT

Fetches a URL on behalf of a caller, guarding against SSRF, and hands back
a double-wrapped password-protected archive of the content.
"""

__version__ = "1.0.0"
