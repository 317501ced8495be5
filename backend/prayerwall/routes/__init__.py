# Routes package init
"""
Prayer Wall Backend — API Routes Package
==========================================

Route Inventory:
    - prayers.py: GET    /api/prayers          (list, newest first)
                  POST   /api/prayers          (share a prayer)
                  DELETE /api/prayers?id=<id>  (remove a prayer)
    - health.py:  GET    /health               (service health check)
                  GET    /api/test             (routing smoke test)

Routes stay thin: they read the request, call PrayerService, and let the
global exception handlers in main.py shape error responses.
"""
