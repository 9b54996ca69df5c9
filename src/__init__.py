"""
Campus2Career - Interview Session Engine

Drives a mock-interview conversation from creation through completion:
question sequencing, follow-up depth limiting, the conversation log, and
end-of-interview feedback.
"""

__version__ = "0.1.0"
