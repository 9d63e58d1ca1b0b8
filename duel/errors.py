"""Error taxonomy for rejected duel operations."""


class DuelError(Exception):
    """Base class for every rejected operation. Carries a kind and a readable message."""

    kind = 'error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'detail': self.message}


class Unauthorized(DuelError):
    """Caller is not a participant (or not the role allowed to act)."""
    kind = 'unauthorized'


class InvalidState(DuelError):
    """Operation is not legal in the current phase or status."""
    kind = 'invalid_state'


class PreconditionFailed(DuelError):
    """A business rule rejected the operation."""
    kind = 'precondition_failed'


class NotFound(DuelError):
    """Duel or theme missing."""
    kind = 'not_found'


class VersionConflict(DuelError):
    """Another writer committed between our read and our write."""
    kind = 'version_conflict'
