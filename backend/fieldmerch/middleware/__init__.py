# Middleware package init
"""
FieldMerch Backend: Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Identity] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: reject floods before any processing
    2. Request ID: correlation ID for logs and error bodies
    3. Identity: caller identity from the auth gateway's headers
    4. Logging: access log with request ID and caller id
"""
