"""Response middleware: security headers and CORS."""

from typing import Optional

from flask import Flask, request


class SecurityHeadersMiddleware:
    """Adds security and CORS headers to every response."""

    def __init__(self, app: Optional[Flask] = None):
        if app:
            self.init_app(app)

    def init_app(self, app: Flask):
        self.allowed_origins = app.config.get("CORS_ORIGINS") or []
        app.after_request(self.after_request)

    def after_request(self, response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        origin = request.headers.get("Origin")
        if origin and ("*" in self.allowed_origins or origin in self.allowed_origins):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            if request.method == "OPTIONS":
                response.headers["Access-Control-Allow-Methods"] = (
                    "GET, POST, PUT, PATCH, DELETE, OPTIONS"
                )
                response.headers["Access-Control-Allow-Headers"] = (
                    "Content-Type, Authorization"
                )

        return response
