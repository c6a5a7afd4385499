from test.site_notifications.base import ApiHandlerTestCase, api_event
from typing import Any, Dict, Optional

from site_notifications.datastore.model import EmailSubscription
from site_notifications.handlers.newsletter.broadcast import NewsletterBroadcastHandler

AUTHORIZATION = "Bearer admin-token"
NEWSLETTER = {"subject": "Spring update", "content": "<h2>News</h2>\nWe have moved."}


class NewsletterBroadcastHandlerTests(ApiHandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.datastore.subscriptions = [
            EmailSubscription(email="a@x.com"),
            EmailSubscription(email="b@x.com"),
            EmailSubscription(email="inactive@x.com", is_active=False),
        ]
        self.datastore.profile_emails = ["b@x.com", "c@x.com"]
        self.handler = NewsletterBroadcastHandler.get_handler(
            settings=self.settings, datastore=self.datastore, notifier=self.notifier
        )

    def broadcast(
        self, body: Any, authorization: Optional[str] = AUTHORIZATION, method: str = "POST"
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if authorization is not None:
            headers["Authorization"] = authorization
        return self.invoke(self.handler, api_event(method=method, body=body, headers=headers))

    def test__handler__sends_one_batch_to_unique_recipients(self):
        response = self.broadcast(NEWSLETTER)

        self.assertEqual(response["statusCode"], 200)
        self.assertDictEqual(
            self.body_of(response),
            {
                "success": True,
                "recipientCount": 3,
                "emailId": "email-1",
                "requestId": response["headers"]["X-Request-Id"],
            },
        )

        self.assertEqual(len(self.notifier.messages), 1)
        message = self.notifier.messages[0]
        self.assertEqual(message.source, self.settings.broadcast_from_email)
        self.assertListEqual(message.recipients, ["a@x.com", "b@x.com", "c@x.com"])
        self.assertEqual(message.subject, "Spring update")

    def test__handler__dedupes_recipients_regardless_of_order(self):
        orderings = [
            (["a@x.com", "b@x.com"], ["b@x.com", "c@x.com"]),
            (["b@x.com", "a@x.com"], ["c@x.com", "b@x.com"]),
            (["c@x.com", "b@x.com"], ["a@x.com", "b@x.com"]),
        ]
        for subscription_emails, profile_emails in orderings:
            with self.subTest(subscriptions=subscription_emails, profiles=profile_emails):
                self.datastore.subscriptions = [
                    EmailSubscription(email=email) for email in subscription_emails
                ]
                self.datastore.profile_emails = profile_emails
                self.notifier.messages.clear()

                response = self.broadcast(NEWSLETTER)

                self.assertEqual(self.body_of(response)["recipientCount"], 3)
                recipients = self.notifier.messages[0].recipients
                self.assertEqual(len(recipients), 3)
                self.assertSetEqual(set(recipients), {"a@x.com", "b@x.com", "c@x.com"})

    def test__handler__embeds_content_without_escaping(self):
        self.broadcast(NEWSLETTER)

        html = self.notifier.messages[0].html
        self.assertIn("<h2>News</h2><br>We have moved.", html)
        self.assertIn("Efie Plans", html)

    def test__handler__forwards_caller_authorization(self):
        self.broadcast(NEWSLETTER)

        self.assertEqual(self.datastore.forwarded_authorization, AUTHORIZATION)

    def test__handler__records_send(self):
        self.broadcast(NEWSLETTER)

        self.assertEqual(len(self.datastore.newsletter_sends), 1)
        record = self.datastore.newsletter_sends[0]
        self.assertEqual(record.subject, "Spring update")
        self.assertEqual(record.content, NEWSLETTER["content"])
        self.assertEqual(record.recipient_count, 3)
        self.assertTrue(record.sent_at)

    def test__handler__succeeds_when_recording_send_fails(self):
        self.datastore.fail_on.add("insert_newsletter_send")

        response = self.broadcast(NEWSLETTER)

        self.assertEqual(response["statusCode"], 200)
        self.assertEqual(self.body_of(response)["recipientCount"], 3)
        self.assertListEqual(self.datastore.newsletter_sends, [])

    def test__handler__returns_early_without_recipients(self):
        self.datastore.subscriptions = []
        self.datastore.profile_emails = []

        response = self.broadcast(NEWSLETTER)

        self.assertEqual(response["statusCode"], 200)
        self.assertDictEqual(
            self.body_of(response),
            {
                "success": True,
                "recipientCount": 0,
                "message": "No email recipients found",
                "requestId": response["headers"]["X-Request-Id"],
            },
        )
        self.assertListEqual(self.notifier.messages, [])
        self.assertListEqual(self.datastore.newsletter_sends, [])

    def test__handler__rejects_missing_authorization(self):
        response = self.broadcast(NEWSLETTER, authorization=None)

        self.assertErrorResponse(response, 401, "Authorization header is missing")
        self.assertListEqual(self.datastore.calls, [])
        self.assertListEqual(self.notifier.messages, [])

    def test__handler__rejects_missing_fields(self):
        for body in [{"subject": "Spring update"}, {"content": "News"}, {}]:
            with self.subTest(body=body):
                response = self.broadcast(body)

                self.assertErrorResponse(
                    response, 400, "Missing required fields: subject and content"
                )
        self.assertListEqual(self.datastore.calls, [])

    def test__handler__reports_subscription_query_failures(self):
        self.datastore.fail_on.add("list_active_subscriptions")

        response = self.broadcast(NEWSLETTER)

        self.assertErrorResponse(response, 500, "list_active_subscriptions failed")
        self.assertListEqual(self.notifier.messages, [])

    def test__handler__reports_profile_query_failures(self):
        self.datastore.fail_on.add("list_profile_emails")

        response = self.broadcast(NEWSLETTER)

        self.assertErrorResponse(response, 500, "list_profile_emails failed")
        self.assertListEqual(self.notifier.messages, [])

    def test__handler__does_not_record_send_when_delivery_fails(self):
        self.notifier.fail = True

        response = self.broadcast(NEWSLETTER)

        self.assertErrorResponse(
            response, 500, "Failed to send newsletter: Email address is not verified."
        )
        self.assertListEqual(self.datastore.newsletter_sends, [])

    def test__handler__answers_preflight(self):
        response = self.broadcast(None, authorization=None, method="OPTIONS")

        self.assertEqual(response["statusCode"], 200)
        self.assertEqual(response["headers"]["Access-Control-Max-Age"], "86400")
        self.assertListEqual(self.datastore.calls, [])
