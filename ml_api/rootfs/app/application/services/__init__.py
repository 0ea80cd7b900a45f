"""Use cases shared by the HTTP API and the ``ml-api`` command line."""

from .ml_application_service import MLApplicationService

__all__ = ["MLApplicationService"]
