class NotFoundError(LookupError):
    """A referenced user, post, conversation or listing does not exist."""


class ForbiddenError(PermissionError):
    """The caller may not act on this entity."""


class InvalidRequestError(ValueError):
    """The request is well-formed but cannot be applied."""
