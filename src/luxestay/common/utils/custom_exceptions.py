class HotelError(Exception):
    status_code = 500


class InvalidRequest(HotelError):
    status_code = 400


class InvalidRange(InvalidRequest):
    pass


class NotFoundException(HotelError):
    status_code = 404

    def __init__(self, resource: str, identifier: str, status_code: int = 404):
        super().__init__(resource, identifier)
        self.resource = resource
        self.identifier = identifier
        self.status_code = status_code

    def __str__(self):
        return f"{self.resource} '{self.identifier}' not found"


class RoomNotFound(NotFoundException):
    def __init__(self, room_id: str):
        super().__init__("room", room_id)


class BookingNotFound(NotFoundException):
    def __init__(self, booking_id: str):
        super().__init__("booking", booking_id)


class UserNotFound(NotFoundException):
    def __init__(self, user_id: str):
        super().__init__("user", user_id)


class ConflictError(HotelError):
    status_code = 409


class RoomUnavailable(ConflictError):
    pass


class UserAlreadyExists(ConflictError):
    pass


class AlreadyCancelled(ConflictError):
    pass


class RoomHasActiveBookings(ConflictError):
    pass


class AuthError(HotelError):
    status_code = 401


class IncorrectCredentials(AuthError):
    pass


class TokenMalformed(AuthError):
    pass


class TokenBadSignature(AuthError):
    pass


class TokenExpired(AuthError):
    pass


class TokenRevoked(AuthError):
    pass


class Forbidden(HotelError):
    status_code = 403


class DependencyError(HotelError):
    status_code = 502


class UploadError(DependencyError):
    pass


class PaymentError(DependencyError):
    pass


class TextGenerationError(DependencyError):
    pass


class StorageBusy(HotelError):
    """Storage contention outlasted the retries; the caller may try again."""

    status_code = 503


class RoomVersionConflict(Exception):
    """Another writer changed the room between read and commit."""


class ConfirmationCodeTaken(Exception):
    pass
