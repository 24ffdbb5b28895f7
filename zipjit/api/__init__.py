"""
API Layer

Versioned flask-restx REST API.
"""
