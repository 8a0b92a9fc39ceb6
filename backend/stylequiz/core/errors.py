class StyleQuizError(Exception):
    """Base class for quiz engine errors"""


class ContentUnavailable(StyleQuizError):
    """No quiz content (client or questions) could be resolved for a request"""


class PersistenceFailure(StyleQuizError):
    """The result store rejected a write or could not be reached"""


class MalformedTraitData(StyleQuizError):
    """A trait-weight or trait-level field failed to decode"""

    def __init__(self, field: str, raw, reason: str):
        self.field = field
        self.raw = raw
        self.reason = reason
        super().__init__(f"Malformed trait data in '{field}': {reason}")


class SessionNotFound(StyleQuizError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class InvalidTransition(StyleQuizError):
    """An event arrived that the session's current phase does not accept"""

    def __init__(self, phase: str, event: str):
        self.phase = phase
        self.event = event
        super().__init__(f"Cannot handle '{event}' while session is in phase '{phase}'")
