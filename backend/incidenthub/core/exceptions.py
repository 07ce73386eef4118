"""Typed failures raised by the service layer.

Each subclass carries the HTTP status the error boundary in
``incidenthub.main`` renders it with.
"""

from fastapi import status


class IncidentHubError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(IncidentHubError):
    """A User or Incident does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class AlreadyExistsError(IncidentHubError):
    """Username or email already taken at registration."""
    status_code = status.HTTP_409_CONFLICT


class ForbiddenError(IncidentHubError):
    """Authenticated, but the role or ownership does not allow it."""
    status_code = status.HTTP_403_FORBIDDEN


class InvalidInputError(IncidentHubError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(IncidentHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
