# Middleware package init
"""
DiscoverHealth Backend — Middleware Package
=============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [Session] → [GZip] → [CORS] → Route

    1. Rate Limit FIRST: reject abusive clients before any database work
    2. Request ID: correlation ID for logs and error bodies
    3. Logging: one access line per request, tagged with the request ID
    4. Session: resolve the cookie into request.state.session, write it back
    5. GZip / CORS: Starlette's stock middleware

    Responses travel the chain in reverse, so the access log sees the final
    status code and the session cookie is already set when the request ID
    header is added.
"""
