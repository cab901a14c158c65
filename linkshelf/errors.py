class LinkShelfError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LinkShelfError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateLink(LinkShelfError):
    status_code = 400
    default_message = "Link already saved"


class Unauthorized(LinkShelfError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(LinkShelfError):
    status_code = 404
    default_message = "Link not found"


class Conflict(LinkShelfError):
    status_code = 409
    default_message = "Conflict"


class InternalError(LinkShelfError):
    status_code = 500
