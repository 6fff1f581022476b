"""Error taxonomy.

Every error carries a user-facing ``message`` that the presentation layer
shows verbatim. ``status_code`` is the HTTP status the API answers with.
"""

from typing import Iterable, Optional


class SpellwatchError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Validation

class ValidationError(SpellwatchError):
    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


# Business rules

class BusinessRuleError(SpellwatchError):
    status_code = 409


class AlreadyActiveError(BusinessRuleError):
    def __init__(self, city: str):
        super().__init__(f"A spell is already active for {city}.")
        self.city = city


class NoActiveSpellError(BusinessRuleError):
    def __init__(self, city: str):
        super().__init__(f"No active spell found for {city}.")
        self.city = city


class RainfallStillActiveError(BusinessRuleError):
    def __init__(self, city: str, point_names: Iterable[str]):
        self.city = city
        self.point_names = list(point_names)
        names = ", ".join(f'"{n}"' for n in self.point_names)
        super().__init__(
            f"Cannot stop the spell for {city} while rainfall is still being recorded at {names}. "
            "Set the current spell of every point to 0 mm first."
        )


class ClearanceRequiredError(BusinessRuleError):
    def __init__(self, point_names: Iterable[str]):
        self.point_names = list(point_names)
        names = ", ".join(f'"{n}"' for n in self.point_names)
        super().__init__(f"Clearance time required for {names}: ponding was cleared to 0 without a cleared-in time.")


class DuplicateRequestError(BusinessRuleError):
    def __init__(self, email: str):
        super().__init__("A pending request for this email already exists.")
        self.email = email


class InvalidTransitionError(BusinessRuleError):
    pass


# Not found

class NotFoundError(SpellwatchError):
    status_code = 404


class PointNotFoundError(NotFoundError):
    def __init__(self, point_id: str, city: str):
        super().__init__(f"Ponding point {point_id} not found in {city}.")
        self.point_id = point_id
        self.city = city


class RequestNotFoundError(NotFoundError):
    def __init__(self, request_id: str):
        super().__init__(f"Access request {request_id} not found.")
        self.request_id = request_id


class NoReportError(NotFoundError):
    def __init__(self, city: str):
        super().__init__(f"There are no completed spell reports for {city} yet.")
        self.city = city


# Infrastructure

class InfrastructureError(SpellwatchError):
    status_code = 503
    public_message = "The service is temporarily unavailable. Please try again later."


class StoreError(InfrastructureError):
    pass


class DocumentExistsError(StoreError):
    pass


class WeatherConfigError(InfrastructureError):
    pass


class WeatherUnavailableError(InfrastructureError):
    pass
