"""Exceptions raised by the matching engine.

All matching exceptions inherit from MatchingError so an API layer can map
them to responses with a single except clause. Collaborator failures
(database, network) are not wrapped here and propagate unchanged.
"""

from typing import List, Optional


class MatchingError(Exception):
    """Base exception for matching engine errors."""

    pass


class ValidationError(MatchingError):
    """Raised when a match request is rejected before any candidate is fetched.

    Examples:
    - zero or several matching modes set
    - match threshold outside [0, 100] or max results outside [1, 500]
    - unknown sort field or direction
    - client has no stored search criteria
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.errors:
            return self.message
        lines = [self.message]
        lines.extend(f"  - {error}" for error in self.errors)
        return "\n".join(lines)


class NotFoundError(MatchingError, LookupError):
    """Raised when a referenced client or property does not exist for the agent."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")
