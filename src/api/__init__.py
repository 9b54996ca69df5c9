"""
API layer for the interview engine

Contains FastAPI routers for:
- Interview session lifecycle
- Feedback retrieval
- Per-user listings and statistics
"""

from src.api.router import api_router

__all__ = ["api_router"]
