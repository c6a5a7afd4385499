from test.base import BaseTest

from site_notifications.common.html import escape_html, is_valid_email, newlines_to_br


class EscapeHtmlTests(BaseTest):
    def test__escape_html__escapes_markup_characters(self):
        self.assertEqual(
            escape_html("<script>alert(\"x\")</script>"),
            "&lt;script&gt;alert(&quot;x&quot;)&lt;/script&gt;",
        )

    def test__escape_html__escapes_ampersand_and_single_quote(self):
        self.assertEqual(escape_html("Tom & Jerry's"), "Tom &amp; Jerry&#x27;s")

    def test__escape_html__leaves_plain_text_unchanged(self):
        self.assertEqual(escape_html("Hello there"), "Hello there")

    def test__escape_html__escapes_already_escaped_text_again(self):
        self.assertEqual(escape_html("&lt;"), "&amp;lt;")


class NewlinesToBrTests(BaseTest):
    def test__newlines_to_br__replaces_every_newline(self):
        self.assertEqual(newlines_to_br("a\nb\n\nc"), "a<br>b<br><br>c")


class IsValidEmailTests(BaseTest):
    def test__is_valid_email__accepts_simple_addresses(self):
        self.assertTrue(is_valid_email("a@b.co"))
        self.assertTrue(is_valid_email("first.last+tag@sub.example.org"))

    def test__is_valid_email__rejects_malformed_addresses(self):
        for email in ["not-an-email", "a@b", "@b.co", "a@.", "a b@c.de", "a@b .co", ""]:
            with self.subTest(email=email):
                self.assertFalse(is_valid_email(email))
