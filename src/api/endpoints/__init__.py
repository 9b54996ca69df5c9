"""
API endpoint modules for the interview engine
"""

from src.api.endpoints import sessions

__all__ = ["sessions"]
