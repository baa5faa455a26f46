from core.detector import combine_changes, detect_changes
from core.memory_guard import MemoryGuard
from core.scheduler import RESTART_EXIT_CODE, Scheduler
from core.state_store import StateStore

__all__ = [
    "MemoryGuard",
    "RESTART_EXIT_CODE",
    "Scheduler",
    "StateStore",
    "combine_changes",
    "detect_changes",
]
