"""
tabletads API Routers.

Modules:
    health     – Health, readiness and liveness checks
    impression – ``track-impression`` edge function
    playlist   – ``get-ads`` edge function
"""
