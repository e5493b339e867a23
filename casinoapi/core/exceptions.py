from fastapi import HTTPException, status
from typing import Optional, Dict, Any

class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": error_code,
                    "message": message,
                    "details": self.details
                }
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message

class AuthenticationError(BaseAPIException):
    """Missing or malformed caller identity"""
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )

class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )

class NotFoundError(BaseAPIException):
    """Resource not found errors"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details
        )

class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )

class InsufficientBalanceError(BaseAPIException):
    """Insufficient balance errors"""
    def __init__(self, message: str = "Insufficient balance", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BALANCE_001",
            message=message,
            details=details
        )

class InvalidAmountError(BaseAPIException):
    """Non-positive, non-finite or non-numeric amount"""
    def __init__(self, message: str = "Amount must be a positive number", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="BALANCE_002",
            message=message,
            details=details
        )

class WithdrawalLockedError(BaseAPIException):
    """Withdrawal attempted while a bonus is still being wagered"""
    def __init__(self, message: str = "Withdrawals are locked while a bonus is active", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BALANCE_003",
            message=message,
            details=details
        )

class BalanceLimitExceededError(BaseAPIException):
    """Resulting balance or wagering requirement exceeds the storable maximum"""
    def __init__(self, message: str = "Balance limit exceeded", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BALANCE_004",
            message=message,
            details=details
        )

class IneligiblePromotionError(BaseAPIException):
    """Promotion eligibility rule failed"""
    def __init__(self, message: str = "Promotion is not available", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="PROMOTION_001",
            message=message,
            details=details
        )

class GrantNotFoundError(BaseAPIException):
    """Bonus grant does not exist for the user"""
    def __init__(self, message: str = "Bonus grant not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="PROMOTION_002",
            message=message,
            details=details
        )

class GrantNotActiveError(BaseAPIException):
    """Bonus grant already completed or cancelled"""
    def __init__(self, message: str = "Bonus grant is no longer active", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="PROMOTION_003",
            message=message,
            details=details
        )

class InvalidLimitError(BaseAPIException):
    """History page size out of range"""
    def __init__(self, message: str = "Invalid limit parameter", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="HISTORY_001",
            message=message,
            details=details
        )

class StorageUnavailableError(BaseAPIException):
    """Transaction could not commit; safe to retry"""
    def __init__(self, message: str = "Storage temporarily unavailable, please retry", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="STORAGE_001",
            message=message,
            details=details
        )
