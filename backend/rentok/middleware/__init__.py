# Middleware package init
"""
RentOK Admin Backend — Middleware Package
==========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [CORS] → [Request ID] → [Logging] → [Access Gate] → [GZip] → Route Handler

    1. CORS first: preflight OPTIONS requests are answered before the gate
       can redirect them
    2. Request ID: correlation ID for every later log line
    3. Logging: records the final status, including gate redirects
    4. Access Gate: allow, redirect to /login, or redirect to the role home
"""
