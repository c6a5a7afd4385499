"""API Gateway Lambda handler base class.

Provides the base class for notification handlers invoked through an
API Gateway REST proxy integration: CORS preflight, method checks,
authorization, body parsing and JSON responses carrying a correlation id.
"""

__all__ = [
    "ApiLambdaHandler",
]

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Generic, Optional, Tuple, TypeVar, Union

import marshmallow as mm
from aibs_informatics_core.models.base import SchemaModel
from aws_lambda_powertools.event_handler import content_types
from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent
from aws_lambda_powertools.utilities.typing import LambdaContext

from site_notifications.common.api.model import ApiError, ErrorKind
from site_notifications.common.handler import LambdaEvent, LambdaHandler, LambdaHandlerType
from site_notifications.common.logging import bind_request, error_fields
from site_notifications.common.settings import ConfigurationError

API_REQUEST = TypeVar("API_REQUEST", bound=SchemaModel)
API_RESPONSE = TypeVar("API_RESPONSE", bound=SchemaModel)

REQUEST_ID_HEADER = "X-Request-Id"
AUTHORIZATION_HEADER = "Authorization"

DEFAULT_CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass  # type: ignore[misc] # mypy #5374
class ApiLambdaHandler(
    LambdaHandler[API_REQUEST, API_RESPONSE],
    Generic[API_REQUEST, API_RESPONSE],
):
    """Base class for API Gateway proxy handlers.

    Each invocation gets a fresh correlation id, attached to every log line and
    returned in both the `X-Request-Id` header and the `requestId` body field.
    An invocation proceeds through the following steps, each of which may end it
    early with an `ApiError`:

    1. `OPTIONS` preflight requests are answered with CORS headers only.
    2. Methods other than `allowed_methods` are rejected with 405.
    3. `authorize` checks the caller. No check by default.
    4. The JSON body is parsed (`parse_body`) and loaded into the request model.
    5. `handle` runs the handler's own steps.

    Errors are rendered as `{error, requestId, timestamp}` with the status code of
    their kind. Exceptions escaping a step are reported as internal errors.

    Type Parameters:
        API_REQUEST: The request model type.
        API_RESPONSE: The response model type.

    Example:
        ```python
        @dataclass
        class PingHandler(ApiLambdaHandler[PingRequest, PingResponse]):
            log_context: ClassVar[str] = "PING"

            def handle(self, request: PingRequest) -> Union[PingResponse, ApiError]:
                if not request.name:
                    return ApiError(ErrorKind.VALIDATION, "name is required")
                return PingResponse(message=f"pong {request.name}")

        handler = PingHandler.get_handler()
        ```
    """

    _current_event: Optional[APIGatewayProxyEvent] = field(default=None, repr=False)
    _request_id: Optional[str] = field(default=None, repr=False)

    log_context: ClassVar[str] = "API"
    allowed_methods: ClassVar[Tuple[str, ...]] = ("POST",)
    cors_allow_headers: ClassVar[str] = DEFAULT_CORS_ALLOW_HEADERS
    cors_allow_methods: ClassVar[str] = "POST, OPTIONS"
    cors_max_age: ClassVar[Optional[int]] = None

    @property
    def current_event(self) -> APIGatewayProxyEvent:
        """Get the API Gateway proxy event of the current invocation.

        Raises:
            ValueError: If no event is currently set.
        """
        if self._current_event is None:
            raise ValueError(f"Current event not set for {self}.")
        return self._current_event

    @current_event.setter
    def current_event(self, value: APIGatewayProxyEvent):
        self._current_event = value

    @property
    def request_id(self) -> str:
        if self._request_id is None:
            raise ValueError(f"Request id not set for {self}.")
        return self._request_id

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive lookup of a request header."""
        for key, value in (self.current_event.headers or {}).items():
            if key.lower() == name.lower():
                return value
        return None

    # --------------------------------------------------------------------
    # Steps
    # --------------------------------------------------------------------

    def authorize(self) -> Optional[ApiError]:
        """Check the caller before the request body is read.

        Returns:
            An error to end the invocation with, or None to continue.
        """
        return None

    def parse_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for unwrapping the JSON body before it is loaded into the request model."""
        return body

    def load_request(self) -> Union[API_REQUEST, ApiError]:
        raw_body = self.current_event.decoded_body
        if not raw_body:
            body: Any = {}
        else:
            try:
                body = json.loads(raw_body)
            except ValueError as e:
                return ApiError(ErrorKind.VALIDATION, "Invalid JSON body", cause=e)
        if not isinstance(body, dict):
            return ApiError(ErrorKind.VALIDATION, "Request body must be a JSON object")

        try:
            return self.deserialize_request(self.parse_body(body))
        except mm.ValidationError as e:
            return ApiError(ErrorKind.VALIDATION, f"Invalid request: {e.messages}", cause=e)

    def handle(self, request: API_REQUEST) -> Union[API_RESPONSE, ApiError]:  # type: ignore[override]
        raise NotImplementedError(  # pragma: no cover
            f"{self.__class__.__name__} must implement `handle`"
        )

    def dispatch(self) -> Union[API_RESPONSE, ApiError]:
        """Run the method check, authorization, body loading and handler steps."""
        method = (self.current_event.http_method or "").upper()
        if method not in self.allowed_methods:
            return ApiError(
                ErrorKind.METHOD_NOT_ALLOWED, "Method not allowed", details={"method": method}
            )

        auth_error = self.authorize()
        if auth_error is not None:
            return auth_error

        request = self.load_request()
        if isinstance(request, ApiError):
            return request

        return self.handle(request)

    # --------------------------------------------------------------------
    # Responses
    # --------------------------------------------------------------------

    @classmethod
    def serialize_response(cls, response: API_RESPONSE) -> Dict[str, Any]:  # type: ignore[override]
        """Serialize the response model, leaving out unset optional fields."""
        return {k: v for k, v in response.to_dict().items() if v is not None}

    @classmethod
    def cors_headers(cls) -> Dict[str, str]:
        headers = {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": cls.cors_allow_headers,
            "Access-Control-Allow-Methods": cls.cors_allow_methods,
        }
        if cls.cors_max_age is not None:
            headers["Access-Control-Max-Age"] = str(cls.cors_max_age)
        return headers

    @classmethod
    def build_response(
        cls, status_code: int, body: Optional[Dict[str, Any]], request_id: str
    ) -> Dict[str, Any]:
        headers = {**cls.cors_headers(), REQUEST_ID_HEADER: request_id}
        if body is None:
            return {"statusCode": status_code, "headers": headers, "body": ""}
        headers["Content-Type"] = content_types.APPLICATION_JSON
        return {
            "statusCode": status_code,
            "headers": headers,
            "body": json.dumps({**body, "requestId": request_id}),
        }

    @classmethod
    def build_error_response(cls, error: ApiError, request_id: str) -> Dict[str, Any]:
        return cls.build_response(
            error.status_code, {"error": error.message, "timestamp": utc_timestamp()}, request_id
        )

    @classmethod
    def log_error(cls, logger: Logger, error: ApiError):
        extra = {
            "error_kind": error.kind.value,
            "status_code": error.status_code,
            **error_fields(error.cause),
            **error.details,
        }
        if error.status_code >= 500:
            logger.error(error.message, exc_info=error.cause, extra=extra)
        else:
            logger.warning(error.message, extra=extra)

    # --------------------------------------------------------------------
    # Handler provider
    # --------------------------------------------------------------------

    @classmethod
    def get_handler(cls, *args, **kwargs) -> LambdaHandlerType:
        """Create the Lambda entry point for this handler class.

        The handler class is instantiated once per invocation with the given
        arguments. Collaborators that should live for the whole process (clients,
        settings) are passed in or resolved from cached factories by the subclass.

        Args:
            *args: Positional arguments passed to the handler constructor.
            **kwargs: Keyword arguments passed to the handler constructor.

        Returns:
            A callable Lambda handler function returning API Gateway proxy responses.
        """
        logger = cls.get_logger(service=cls.service_name())
        metrics = cls.get_metrics(service=cls.service_name())

        @metrics.log_metrics
        @logger.inject_lambda_context(clear_state=True)
        def handler(event: LambdaEvent, context: LambdaContext) -> Dict[str, Any]:
            start = datetime.now()
            request_id = str(uuid.uuid4())
            bind_request(logger, request_id, cls.log_context)
            metrics.add_dimension(name="handler", value=cls.handler_name())

            proxy_event = APIGatewayProxyEvent(event)
            logger.info(
                f"Request started - ID: {request_id}",
                extra={"method": proxy_event.http_method, "path": proxy_event.path},
            )

            if (proxy_event.http_method or "").upper() == "OPTIONS":
                logger.info("CORS preflight handled")
                return cls.build_response(200, None, request_id)

            result: Union[API_RESPONSE, ApiError]
            try:
                lambda_handler = cls(
                    *args, _current_event=proxy_event, _request_id=request_id, **kwargs
                )
                lambda_handler.log = logger
                lambda_handler.metrics = metrics
                lambda_handler.context = context
                lambda_handler.add_logger_to_root()
                result = lambda_handler.dispatch()
            except ConfigurationError as e:
                result = ApiError(ErrorKind.CONFIGURATION, str(e), cause=e)
            except Exception as e:
                result = ApiError(ErrorKind.INTERNAL, str(e) or "Unknown error occurred", cause=e)

            if isinstance(result, ApiError):
                cls.log_error(logger, result)
                metrics.add_failure_metric()
                response = cls.build_error_response(result, request_id)
            else:
                metrics.add_success_metric()
                response = cls.build_response(200, cls.serialize_response(result), request_id)

            metrics.add_duration_metric(start=start)
            logger.info("Request completed", extra={"status_code": response["statusCode"]})
            return response

        return handler

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(methods={self.allowed_methods})"
