"""Exceptions raised at the boundaries between the engine and its collaborators."""


class SpendEasyError(Exception):
    """Base class for spendeasy errors."""


class RepositoryError(SpendEasyError):
    """The expense store could not save or delete a record."""


class QueryError(RepositoryError):
    """The expense store could not return expenses for a range."""


class ScheduleError(SpendEasyError):
    """A notification could not be scheduled, cancelled or permitted."""


class FlagStoreError(SpendEasyError):
    """Persisted reminder flags could not be read or written."""


class DeliveryError(SpendEasyError):
    """A due notification could not be delivered."""
