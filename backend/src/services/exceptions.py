"""Shared exceptions for service layer operations."""


class NotFoundError(Exception):
    """
    Raised when an operation targets a resource that doesn't exist.

    Routers translate this to 404.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: object,
        message: str | None = None,
    ) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message or f"{entity_type.capitalize()} not found")


class ForbiddenError(Exception):
    """
    Raised when an authenticated user operates on a resource owned by someone else.

    Routers translate this to 403.
    """

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__("Forbidden")


class TokenNotFoundError(NotFoundError):
    """Raised when an API token id doesn't exist."""

    def __init__(self, token_id: object) -> None:
        super().__init__("token", token_id)


class TokenForbiddenError(ForbiddenError):
    """Raised when an API token belongs to another user."""

    def __init__(self, token_id: object) -> None:
        super().__init__("token", token_id)


class SubscriptionNotFoundError(NotFoundError):
    """Raised when a subscription id doesn't exist."""

    def __init__(self, subscription_id: object) -> None:
        super().__init__("subscription", subscription_id)


class SubscriptionForbiddenError(ForbiddenError):
    """Raised when a subscription belongs to another user."""

    def __init__(self, subscription_id: object) -> None:
        super().__init__("subscription", subscription_id)


class WeatherNotAvailableError(NotFoundError):
    """Raised when a subscription has no stored weather yet."""

    def __init__(self, subscription_id: object) -> None:
        super().__init__("weather", subscription_id, "No weather data available yet")


class WeatherProviderError(Exception):
    """Raised when the weather provider returns an error or can't be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
