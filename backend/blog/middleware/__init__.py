"""
Blog Backend - Middleware Package
==================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: assigns the correlation ID every log line and error body uses
    2. Logging: one access line per request with status and duration
"""
