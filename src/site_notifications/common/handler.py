from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Generic, Optional, Tuple, Type, TypeVar, Union, cast

from aibs_informatics_core.models.base import SchemaModel
from aibs_informatics_core.utils.json import JSON
from aws_lambda_powertools.utilities.typing import LambdaContext

from site_notifications.common.base import HandlerMixins
from site_notifications.common.logging import LoggingMixins
from site_notifications.common.metrics import MetricsMixins

LambdaEvent = Union[JSON]  # type: ignore # https://github.com/python/mypy/issues/7866
LambdaHandlerType = Callable[[LambdaEvent, LambdaContext], Optional[JSON]]

REQUEST = TypeVar("REQUEST", bound=SchemaModel)
RESPONSE = TypeVar("RESPONSE", bound=SchemaModel)


@dataclass  # type: ignore[misc] # mypy #5374
class LambdaHandler(
    LoggingMixins,
    MetricsMixins,
    HandlerMixins,
    Generic[REQUEST, RESPONSE],
):
    """Base class for creating strongly-typed AWS Lambda handlers.

    Provides a foundation for Lambda functions with built-in support for:
    - Request/response serialization and deserialization
    - Structured logging via AWS Lambda Powertools
    - CloudWatch metrics collection

    Inherit from the LambdaHandler class (or one of its adapters) to create a handler
    that expects a REQUEST object and returns a RESPONSE object, both `SchemaModel`
    subclasses. The model classes are resolved from the generic parameters.

    Type Parameters:
        REQUEST: The request model type.
        RESPONSE: The response model type.

    Example:
        ```python
        @dataclass
        class MyRequest(SchemaModel):
            name: str

        @dataclass
        class MyResponse(SchemaModel):
            message: str

        class MyHandler(LambdaHandler[MyRequest, MyResponse]):
            def handle(self, request: MyRequest) -> MyResponse:
                return MyResponse(message=f"Hello, {request.name}!")
        ```
    """

    def __post_init__(self):
        self.context = LambdaContext()

    def handle(self, request: REQUEST) -> Optional[RESPONSE]:
        raise NotImplementedError(  # pragma: no cover
            f"{self.__class__.__name__} must implement `handle`"
        )

    @classmethod
    def _get_model_classes(cls) -> Tuple[Type[REQUEST], Type[RESPONSE]]:
        for klass in cls.__mro__:
            for base in klass.__dict__.get("__orig_bases__", ()):
                origin = getattr(base, "__origin__", None)
                args = getattr(base, "__args__", ())
                if (
                    isinstance(origin, type)
                    and issubclass(origin, LambdaHandler)
                    and len(args) == 2
                    and not any(isinstance(arg, TypeVar) for arg in args)
                ):
                    return cast(Tuple[Type[REQUEST], Type[RESPONSE]], args)
        raise TypeError(f"Could not resolve request/response models of {cls.__name__}")

    @classmethod
    def get_request_cls(cls) -> Type[REQUEST]:
        return cls._get_model_classes()[0]

    @classmethod
    def get_response_cls(cls) -> Type[RESPONSE]:
        return cls._get_model_classes()[1]

    @classmethod
    def deserialize_request(cls, request: Dict[str, Any]) -> REQUEST:
        """Build the request model from a JSON object.

        Keys that are not fields of the request model, and null values, are
        dropped before loading so that optional fields fall back to their
        defaults.

        Raises:
            marshmallow.ValidationError: If a value has the wrong type.
        """
        request_cls = cls.get_request_cls()
        field_names = {f.name for f in fields(request_cls)}
        data = {k: v for k, v in request.items() if k in field_names and v is not None}
        return request_cls.from_dict(data)

    @classmethod
    def serialize_response(cls, response: RESPONSE) -> Dict[str, Any]:
        return response.to_dict()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"request: {self.get_request_cls().__name__}, "
            f"response: {self.get_response_cls().__name__}"
            ")"
        )
