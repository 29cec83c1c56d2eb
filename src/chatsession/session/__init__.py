from .budget import TokenBudgetEnforcer, TokenEstimator
from .messages import Message, Role
from .session import SessionState

__all__ = [
    "Message",
    "Role",
    "SessionState",
    "TokenBudgetEnforcer",
    "TokenEstimator",
]
