# Middleware package init
"""
Notebox Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    - Rate Limit only inspects the credential endpoints (/api/register, /api/login)
    - Request ID sets the correlation id used by the access log and error bodies
    - Access Log records method, path, status and duration (never bodies or
      Authorization headers)
"""
