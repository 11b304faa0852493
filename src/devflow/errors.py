from typing import Any, Mapping, TypeVar

import pydantic
from fastapi import status

M = TypeVar("M", bound=pydantic.BaseModel)


class DevflowError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DevflowError):
    """
    Bad input shape. Carries the problems per field so forms can show them
    next to the right input.
    """

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field_errors: dict[str, list[str]]):
        self.field_errors = field_errors
        super().__init__(self.format_message(field_errors))

    @staticmethod
    def format_message(field_errors: dict[str, list[str]]) -> str:
        messages = []
        for field, errors in field_errors.items():
            name = field[:1].upper() + field[1:]
            for error in errors:
                if error == "Required":
                    messages.append(f"{name} is required")
                else:
                    messages.append(error)
        return ", ".join(messages)


class UnauthorizedError(DevflowError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(DevflowError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(DevflowError):
    status_code = status.HTTP_409_CONFLICT


class RequestError(DevflowError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class TransactionError(DevflowError):
    """
    The database rejected a unit of work. The transaction has already been
    rolled back by the time this is raised; the message is safe to show.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Something went wrong, please try again."):
        super().__init__(message)


def field_errors_from_pydantic(errors: list[Any]) -> dict[str, list[str]]:
    field_errors: dict[str, list[str]] = {}
    for error in errors:
        loc = [
            str(part) for part in error["loc"] if part not in ("body", "query", "path")
        ]
        field = ".".join(loc) if loc else "__root__"
        message = error["msg"]
        if error["type"] == "missing":
            message = "Required"
        elif message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        field_errors.setdefault(field, []).append(message)
    return field_errors


def validate(model: type[M], data: M | Mapping[str, Any]) -> M:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(field_errors_from_pydantic(e.errors())) from e
