"""
Ошибки бизнес-логики

Все ошибки наследуются от ValueError, поэтому API может обрабатывать их
так же, как остальные ошибки валидации. status_code используется роутерами
для HTTPException.
"""
from fastapi import status


class RewardsError(ValueError):
    """Базовая ошибка платформы"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class ValidationError(RewardsError):
    """Некорректные входные данные"""
    default_message = "Invalid input"


class InvalidType(ValidationError):
    default_message = "Unknown transaction type"


class InvalidAmount(ValidationError):
    default_message = "Enter a valid USD amount"


class BelowMinimum(ValidationError):
    default_message = "Amount is below the minimum"

    def __init__(self, minimum=None, message: str = None):
        self.minimum = minimum
        if message is None and minimum is not None:
            message = f"Minimum amount is {minimum}$"
        super().__init__(message)


class InsufficientBalance(RewardsError):
    default_message = "Insufficient points balance"

    def __init__(self, required: int = None, available: int = None, message: str = None):
        self.required = required
        self.available = available
        if message is None and required is not None:
            message = f"Insufficient points balance: {required} required, {available} available"
        super().__init__(message)


class StateConflict(RewardsError):
    """Операция недопустима в текущем состоянии"""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Operation is not allowed in the current state"


class RunInProgress(StateConflict):
    default_message = "A task is already in progress"


class NoTaskReady(StateConflict):
    default_message = "No task is ready"


class TaskNotReady(StateConflict):
    default_message = "Task is not ready"


class NotEligible(StateConflict):
    default_message = "Task cannot be completed"


class NotPending(StateConflict):
    default_message = "Request is not pending"


class TooEarly(StateConflict):
    default_message = "Wait for the task to finish"

    def __init__(self, remaining_ms: int = None, message: str = None):
        self.remaining_ms = remaining_ms
        if message is None and remaining_ms is not None:
            message = f"Wait for the task to finish ({max(remaining_ms, 0) // 1000 + 1}s left)"
        super().__init__(message)


class NotFoundError(RewardsError):
    """Объект не найден или не принадлежит пользователю"""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidRun(NotFoundError):
    default_message = "Invalid run"
