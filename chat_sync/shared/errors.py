"""Error taxonomy shared by the stores and the backend adapters."""


class ChatSyncError(Exception):
    """Base exception for every failure raised inside the client core."""

    def __init__(self, message: str, code: str = "CHAT_SYNC_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class NetworkError(ChatSyncError):
    """A query or subscription request did not complete."""

    def __init__(self, message: str = "Backend request failed", status: int | None = None):
        self.status = status
        super().__init__(f"{message} (status {status})" if status else message, "NETWORK_ERROR")


class SubscriptionError(ChatSyncError):
    """A change channel could not be opened or torn down cleanly."""

    def __init__(self, message: str = "Subscription failed", slot: str = ""):
        self.slot = slot
        super().__init__(message, "SUBSCRIPTION_ERROR")


class DataIntegrityError(ChatSyncError):
    """A row references a user or chat that was not delivered with it."""

    def __init__(self, message: str = "Dangling reference"):
        super().__init__(message, "DATA_INTEGRITY_ERROR")
