class StorefrontError(Exception):
    message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class StoreUninitialized(StorefrontError):
    message = "Database not initialized"


class DuplicateUser(StorefrontError):
    message = "User already exists with this email"


class InvalidCredentials(StorefrontError):
    # Same text for unknown email and wrong password
    message = "Invalid email or password"


class QueryFailure(StorefrontError):
    message = "Database query error"


class AuthRequired(StorefrontError):
    message = "You've used all your free prompts. Sign in to continue creating amazing 3D content!"


class MalformedSessionMarker(StorefrontError):
    message = "Malformed session marker"
