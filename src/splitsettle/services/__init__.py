from splitsettle.services.balances import compute_balances
from splitsettle.services.settlement import TOLERANCE, resolve_settlements
from splitsettle.services.validation import UnknownParticipant, ValidationError

__all__ = [
    "TOLERANCE",
    "UnknownParticipant",
    "ValidationError",
    "compute_balances",
    "resolve_settlements",
]
