"""Error taxonomy shared by services, adapters and the API."""

from jet_marina.domain.decisions import Deny


class MarinaError(Exception):
    """Base class for marina errors."""


class ValidationDenied(MarinaError):
    """The eligibility engine or the state machine refused the operation."""

    def __init__(self, denial: Deny) -> None:
        super().__init__(denial.message)
        self.denial = denial

    @property
    def reason(self) -> str:
        return self.denial.reason.value


class CollaboratorFailure(MarinaError):
    """The persistence or fetch layer reported a failure."""


class StaleSnapshotConflict(MarinaError):
    """The stored record no longer matches the snapshot the decision used."""

    def __init__(self, message: str, conflicting_client_name: str | None = None) -> None:
        super().__init__(message)
        self.conflicting_client_name = conflicting_client_name


class NotFound(MarinaError):
    """The referenced record does not exist."""
