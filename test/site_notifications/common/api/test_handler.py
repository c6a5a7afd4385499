import json
from dataclasses import dataclass
from test.site_notifications.base import LambdaHandlerTestCase, api_event
from typing import Any, ClassVar, Dict, Optional, Union

from aibs_informatics_core.models.base import IntegerField, SchemaModel, StringField, custom_field
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent

from site_notifications.common.api.handler import (
    AUTHORIZATION_HEADER,
    REQUEST_ID_HEADER,
    ApiLambdaHandler,
)
from site_notifications.common.api.model import ApiError, ErrorKind
from site_notifications.common.settings import ConfigurationError


@dataclass
class PingRequest(SchemaModel):
    name: str = custom_field(mm_field=StringField(), default="")
    repeat: int = custom_field(mm_field=IntegerField(), default=1)


@dataclass
class PingResponse(SchemaModel):
    message: str = custom_field(mm_field=StringField())
    note: Optional[str] = custom_field(mm_field=StringField(allow_none=True), default=None)


@dataclass
class PingHandler(ApiLambdaHandler[PingRequest, PingResponse]):
    raises: Optional[Exception] = None

    log_context: ClassVar[str] = "PING"

    def authorize(self) -> Optional[ApiError]:
        if self.get_header(AUTHORIZATION_HEADER) == "Bearer blocked":
            return ApiError(ErrorKind.FORBIDDEN, "Forbidden")
        return None

    def parse_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return body.get("payload", body)

    def handle(self, request: PingRequest) -> Union[PingResponse, ApiError]:
        if self.raises is not None:
            raise self.raises
        if not request.name:
            return ApiError(ErrorKind.VALIDATION, "name is required")
        return PingResponse(message=" ".join([f"pong {request.name}"] * request.repeat))


class ApiLambdaHandlerTests(LambdaHandlerTestCase):
    def invoke(self, event: Dict[str, Any], **handler_kwargs) -> Dict[str, Any]:
        response = PingHandler.get_handler(**handler_kwargs)(event, self.context)
        assert isinstance(response, dict)
        return response

    def test__handler__returns_response_with_request_id(self):
        response = self.invoke(api_event(body={"name": "world"}))

        self.assertEqual(response["statusCode"], 200)
        body = json.loads(response["body"])
        request_id = response["headers"][REQUEST_ID_HEADER]
        self.assertDictEqual(body, {"message": "pong world", "requestId": request_id})
        self.assertEqual(response["headers"]["Content-Type"], "application/json")

    def test__handler__uses_unique_request_id_per_invocation(self):
        first = self.invoke(api_event(body={"name": "world"}))
        second = self.invoke(api_event(body={"name": "world"}))

        self.assertNotEqual(
            first["headers"][REQUEST_ID_HEADER], second["headers"][REQUEST_ID_HEADER]
        )

    def test__handler__includes_cors_headers(self):
        response = self.invoke(api_event(body={"name": "world"}))

        headers = response["headers"]
        self.assertEqual(headers["Access-Control-Allow-Origin"], "*")
        self.assertEqual(
            headers["Access-Control-Allow-Headers"],
            "authorization, x-client-info, apikey, content-type",
        )
        self.assertEqual(headers["Access-Control-Allow-Methods"], "POST, OPTIONS")
        self.assertNotIn("Access-Control-Max-Age", headers)

    def test__handler__answers_preflight_without_body(self):
        response = self.invoke(api_event(method="OPTIONS"))

        self.assertEqual(response["statusCode"], 200)
        self.assertEqual(response["body"], "")
        self.assertEqual(response["headers"]["Access-Control-Allow-Origin"], "*")
        self.assertIn(REQUEST_ID_HEADER, response["headers"])

    def test__handler__answers_preflight_with_exact_headers(self):
        mock_uuid4 = self.create_patch("site_notifications.common.api.handler.uuid.uuid4")
        mock_uuid4.return_value = "fixed-request-id"

        self.assertHandles(
            PingHandler.get_handler(),
            api_event(method="OPTIONS"),
            {
                "statusCode": 200,
                "headers": {
                    "Access-Control-Allow-Origin": "*",
                    "Access-Control-Allow-Headers": (
                        "authorization, x-client-info, apikey, content-type"
                    ),
                    "Access-Control-Allow-Methods": "POST, OPTIONS",
                    "X-Request-Id": "fixed-request-id",
                },
                "body": "",
            },
        )

    def test__handler__preflight_skips_handler_construction(self):
        # construction would fail on the unknown keyword
        response = self.invoke(api_event(method="OPTIONS"), unknown_argument=True)

        self.assertEqual(response["statusCode"], 200)

    def test__handler__rejects_other_methods(self):
        response = self.invoke(api_event(method="GET"))

        self.assertEqual(response["statusCode"], 405)
        body = json.loads(response["body"])
        self.assertEqual(body["error"], "Method not allowed")
        self.assertEqual(body["requestId"], response["headers"][REQUEST_ID_HEADER])
        self.assertIn("timestamp", body)

    def test__handler__rejects_invalid_json(self):
        response = self.invoke(api_event(body="{not json"))

        self.assertEqual(response["statusCode"], 400)
        self.assertEqual(json.loads(response["body"])["error"], "Invalid JSON body")

    def test__handler__rejects_non_object_json(self):
        response = self.invoke(api_event(body="[1, 2]"))

        self.assertEqual(response["statusCode"], 400)
        self.assertEqual(
            json.loads(response["body"])["error"], "Request body must be a JSON object"
        )

    def test__handler__rejects_wrongly_typed_fields(self):
        response = self.invoke(api_event(body={"name": "world", "repeat": "twice"}))

        self.assertEqual(response["statusCode"], 400)
        self.assertTrue(json.loads(response["body"])["error"].startswith("Invalid request:"))

    def test__handler__treats_missing_body_as_empty_object(self):
        response = self.invoke(api_event(body=None))

        self.assertEqual(response["statusCode"], 400)
        self.assertEqual(json.loads(response["body"])["error"], "name is required")

    def test__handler__applies_parse_body_hook(self):
        response = self.invoke(api_event(body={"payload": {"name": "hook", "repeat": 2}}))

        self.assertEqual(response["statusCode"], 200)
        self.assertEqual(json.loads(response["body"])["message"], "pong hook pong hook")

    def test__handler__returns_authorization_errors(self):
        response = self.invoke(
            api_event(
                body={"name": "world"},
                headers={"authorization": "Bearer blocked"},
            )
        )

        self.assertEqual(response["statusCode"], 403)
        self.assertEqual(json.loads(response["body"])["error"], "Forbidden")

    def test__handler__reports_unexpected_exceptions_as_internal_errors(self):
        response = self.invoke(api_event(body={"name": "world"}), raises=RuntimeError("boom"))

        self.assertEqual(response["statusCode"], 500)
        self.assertEqual(json.loads(response["body"])["error"], "boom")

    def test__handler__reports_unexpected_exceptions_without_message(self):
        response = self.invoke(api_event(body={"name": "world"}), raises=RuntimeError())

        self.assertEqual(response["statusCode"], 500)
        self.assertEqual(json.loads(response["body"])["error"], "Unknown error occurred")

    def test__handler__reports_configuration_errors(self):
        error = ConfigurationError("Missing required environment variables: SUPABASE_URL")
        response = self.invoke(api_event(body={"name": "world"}), raises=error)

        self.assertEqual(response["statusCode"], 500)
        self.assertEqual(
            json.loads(response["body"])["error"],
            "Missing required environment variables: SUPABASE_URL",
        )


class ApiLambdaHandlerHelperTests(LambdaHandlerTestCase):
    def test__get_header__is_case_insensitive(self):
        handler = PingHandler(_request_id="abc")
        handler.current_event = APIGatewayProxyEvent(
            api_event(headers={"AUTHORIZATION": "Bearer token"})
        )
        self.assertEqual(handler.get_header("Authorization"), "Bearer token")
        self.assertIsNone(handler.get_header("X-Missing"))

    def test__current_event__fails_when_unset(self):
        with self.assertRaises(ValueError):
            PingHandler().current_event

    def test__serialize_response__drops_unset_fields(self):
        self.assertDictEqual(
            PingHandler.serialize_response(PingResponse(message="pong")), {"message": "pong"}
        )

    def test__build_response__merges_request_id_into_body(self):
        response = PingHandler.build_response(201, {"ok": True}, "request-1")

        self.assertEqual(response["statusCode"], 201)
        self.assertEqual(response["headers"][REQUEST_ID_HEADER], "request-1")
        self.assertDictEqual(json.loads(response["body"]), {"ok": True, "requestId": "request-1"})
