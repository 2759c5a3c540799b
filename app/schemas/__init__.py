"""
Schemas module - Request/Response schemas and closed enums.

Difference from documents:
- Documents: what the services store in MongoDB (plain dicts)
- Schemas: API contract (what client sends/receives)
"""
