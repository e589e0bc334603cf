"""
Custom exceptions for the claim leaderboard with user-friendly error messages.
"""

class LeaderboardException(Exception):
    """Base exception for leaderboard-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class DataSourceError(LeaderboardException):
    """Raised when claim records or account profiles cannot be fetched."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Data source error during {operation}: {details}",
            "Leaderboard data is temporarily unavailable. Please try again later."
        )

class FetchTimeoutError(DataSourceError):
    """Raised when an upstream fetch exceeds its time budget."""
    def __init__(self, operation: str, timeout: float):
        super().__init__(operation, f"timed out after {timeout}s")
        self.timeout = timeout

class AccountNotRankedError(LeaderboardException):
    """Raised when an account has no claims inside the requested window."""
    def __init__(self, account_id: str, timeframe: str):
        super().__init__(
            f"No claims found for account '{account_id}' in timeframe '{timeframe}'",
            "No claims found for this user in the specified timeframe"
        )
        self.account_id = account_id
        self.timeframe = timeframe
