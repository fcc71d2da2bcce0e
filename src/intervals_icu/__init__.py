"""intervals_icu 公開API。"""

from intervals_icu.auth import ApiKey, BearerToken, Credential, build_authorization_header
from intervals_icu.client import AsyncIntervalsClient
from intervals_icu.config import ClientConfig, RetryConfig
from intervals_icu.enums import DeviceClass, ErrorKind, EventCategory, FolderType, Visibility
from intervals_icu.errors import (
    ApiError,
    DecodeError,
    ForbiddenError,
    HttpError,
    IntervalsError,
    IntervalsValidationError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ResultError,
    SchemaError,
    StatusError,
    UnauthorizedError,
    UnknownError,
)
from intervals_icu.http import RequestQueue, RetryController
from intervals_icu.result import Err, Ok, Result
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import (
    Activity,
    Athlete,
    Chat,
    ErrorEvent,
    Event,
    Folder,
    Hooks,
    Message,
    RequestEvent,
    RequestOptions,
    ResponseEvent,
    RetryEvent,
    SportInfo,
    Wellness,
    Workout,
)

__all__ = [
    "Activity",
    "ApiError",
    "ApiKey",
    "AsyncIntervalsClient",
    "Athlete",
    "BearerToken",
    "Chat",
    "ClientConfig",
    "Credential",
    "DecodeError",
    "DeviceClass",
    "Err",
    "ErrorEvent",
    "ErrorKind",
    "Event",
    "EventCategory",
    "Folder",
    "FolderType",
    "ForbiddenError",
    "Hooks",
    "HttpError",
    "IntervalsError",
    "IntervalsValidationError",
    "Message",
    "NetworkError",
    "NotFoundError",
    "Ok",
    "RateLimitError",
    "RequestEvent",
    "RequestExecutor",
    "RequestOptions",
    "RequestQueue",
    "RequestTimeoutError",
    "ResponseEvent",
    "Result",
    "ResultError",
    "RetryConfig",
    "RetryController",
    "RetryEvent",
    "SchemaError",
    "SportInfo",
    "StatusError",
    "UnauthorizedError",
    "UnknownError",
    "Visibility",
    "Wellness",
    "Workout",
    "build_authorization_header",
]
