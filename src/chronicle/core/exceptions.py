"""Core exceptions for the change tracking engine and request context."""

from uuid import UUID

from chronicle.utils.exceptions import ChronicleError, TrackingError


class ContextNotSetError(ChronicleError):
    """Raised when attempting to access request context that is not set.

    This indicates operations requiring context are being called outside
    of a request_context() block.
    """

    def __init__(self, message: str = "Request context is not set"):
        super().__init__(message)


class VersionConflictError(TrackingError):
    """Raised when a version number is already taken for an entity.

    Two writers read the same latest version and both tried to append
    version N+1; the loser gets this error and may recompute and retry.

    Attributes:
        entity_type: Type of the versioned entity
        entity_id: Identifier of the versioned entity
        version: The version number that collided
    """

    def __init__(self, entity_type: str, entity_id: str, version: int):
        super().__init__(f"Version {version} already exists for {entity_type}:{entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.version = version

    def __str__(self) -> str:
        return f"VersionConflictError: {self.args[0]}"


class AlertNotFoundError(TrackingError):
    """Raised when an alert mutation targets an unknown alert.

    Attributes:
        alert_id: The identifier of the alert that was not found
    """

    def __init__(self, alert_id: UUID | str):
        super().__init__(f"Change alert not found: {alert_id}")
        self.alert_id = alert_id

    def __str__(self) -> str:
        return f"AlertNotFoundError: {self.args[0]}"


class InvalidPeriodError(TrackingError):
    """Raised when a summary period is not daily, weekly or monthly.

    Attributes:
        period: The rejected period value
    """

    def __init__(self, period: str):
        super().__init__(f"Unsupported summary period: {period}")
        self.period = period

    def __str__(self) -> str:
        return f"InvalidPeriodError: {self.args[0]}"


class OrgAccessDeniedError(ChronicleError):
    """Raised when an operation targets an org other than the active one.

    Attributes:
        org_id: The organization that was requested
        active_org_id: The organization bound to the current request context
    """

    def __init__(self, org_id: str, active_org_id: str):
        super().__init__(f"Access denied to org {org_id} from context of org {active_org_id}")
        self.org_id = org_id
        self.active_org_id = active_org_id

    def __str__(self) -> str:
        return f"OrgAccessDeniedError: {self.args[0]}"
