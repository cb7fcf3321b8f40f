# Middleware package init
"""
PetHaven Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    Request ID runs first so the logging middleware and every exception
    handler can read the ID from the context variable.
"""
