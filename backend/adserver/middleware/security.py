"""Response Headers Middleware

Hardens API responses and keeps ad-serving responses out of shared caches,
since every selection and click must reach the server.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

UNCACHEABLE_PREFIXES = ("/api/ad/random", "/api/redirect/", "/api/impression/")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security and cache headers to all responses"""
    
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        
        # A cached random ad or redirect would skew selection and attribution
        if request.url.path.startswith(UNCACHEABLE_PREFIXES):
            response.headers["Cache-Control"] = "no-store"
        
        return response
