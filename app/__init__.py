"""
PlacedIn
Students share and browse placement/internship experiences.

Architecture:
- MongoDB: every entity (sessions, admin activities, analytics, ratings)
- FastAPI: REST API consumed by the React frontend
"""

__version__ = "1.0.0"
