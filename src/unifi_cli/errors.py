from __future__ import annotations


class UnifiError(RuntimeError):
    pass


class LoginFailedError(UnifiError):
    """Credentials were rejected or the login response could not be used."""


class InvalidIdError(UnifiError):
    def __init__(self, item_id: str | None, message: str | None = None) -> None:
        self.id = item_id
        super().__init__(message or f"Invalid id: {item_id!r}")


class ClientTimeoutError(UnifiError):
    pass


class UnifiHttpError(UnifiError):
    """Any other non-success response or network failure."""

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
