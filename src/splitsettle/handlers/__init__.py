from splitsettle.handlers.basic import basic_router
from splitsettle.handlers.expenses import expenses_router
from splitsettle.handlers.participants import participants_router

__all__ = ["basic_router", "expenses_router", "participants_router"]
