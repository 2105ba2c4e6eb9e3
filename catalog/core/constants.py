from enum import Enum


class PersistenceMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


class DiagnosticKind(str, Enum):
    ORPHAN = "orphan"
    CYCLE = "cycle"
    DUPLICATE = "duplicate"


class DeletionState(str, Enum):
    CHECKING = "checking"
    AWAITING_REASSIGNMENT = "awaiting_reassignment"
    DELETING = "deleting"
    DELETED = "deleted"
