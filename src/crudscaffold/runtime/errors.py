"""Exceptions raised by generated request handlers."""


class CrudError(Exception):
    """Base class for errors raised by generated CRUD code itself.

    Errors raised by storage managers are never wrapped in this hierarchy;
    they reach the caller unchanged.
    """


class InvalidCrudRequestParameters(CrudError):
    """An operation envelope is not valid for the object it was routed to."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
