"""
Services Layer

Business logic for sessions, the menu catalog and orders:
- Accept domain inputs (sessions, typed records)
- Return typed domain records
- Do NOT depend on HTTP request/response objects
- Raise pizza_service.errors classes; status mapping is the routes' job
"""
