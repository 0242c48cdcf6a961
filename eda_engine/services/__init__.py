"""
Service layer for the EDA engine
"""

from .eda_session import EDASession, walkthrough_steps

__all__ = [
    "EDASession",
    "walkthrough_steps",
]
