"""
Security headers middleware.

Applies X-Content-Type-Options, X-Frame-Options, Strict-Transport-Security,
Referrer-Policy and a locked-down Content-Security-Policy to every API
response. The API serves JSON and file downloads only, so nothing needs
script or style sources.

Usage:
    from lencondb.middleware.security_headers import init_security_headers
    init_security_headers(app)
"""

API_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"


def init_security_headers(app):
    """Register after_request handler that injects security headers."""

    @app.after_request
    def _add_security_headers(response):
        response.headers.setdefault("Content-Security-Policy", API_CSP)

        # Prevent MIME-type sniffing of downloaded documents
        response.headers.setdefault("X-Content-Type-Options", "nosniff")

        response.headers.setdefault("X-Frame-Options", "DENY")

        # Ignored over plain HTTP
        response.headers.setdefault(
            "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
        )

        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")

        response.headers.pop("Server", None)

        return response
