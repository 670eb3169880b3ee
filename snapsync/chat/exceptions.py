class ChatClientError(Exception):
    """Raised when channel history cannot be fetched."""


class ChatRateLimitedError(ChatClientError):
    """Raised when the chat platform answers 429."""

    def __init__(self, message: str, retry_after: float = 0.0) -> None:
        super().__init__(message)
        self.retry_after = retry_after
