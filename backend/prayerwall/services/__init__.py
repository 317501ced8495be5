# Services package init
"""
Prayer Wall Backend — Services Layer
======================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services validate input, run the statements inside their own session
       scope, and translate failures into the application's error types.
       Routes get them through FastAPI's dependency injection.

Service Inventory:
    - PrayerService: list, create and delete prayers
    - timestamps.format_timestamp: human-readable "how long ago" strings
"""
