"""Tests for input validation: pure functions, no network."""
import os

import pytest

from mcp_coolify.errors import AuthConfigError, ConfigError, ValidationError
from mcp_coolify.validators import (
    LogQuery,
    validate_log_options,
    validate_token,
    validate_token_path,
    validate_uuid,
    validate_webhook_payload,
)

from conftest import APP_UUID, COOLIFY_ID, TOKEN


# ─── UUIDs ──────────────────────────────────────────────────────

class TestValidateUUID:
    @pytest.mark.parametrize("value", [APP_UUID, APP_UUID.upper(), COOLIFY_ID, "a" * 20, "Z9" * 14])
    def test_accepts_and_returns_unchanged(self, value):
        assert validate_uuid(value) is value

    @pytest.mark.parametrize(
        "value",
        [
            "../etc/passwd",
            f"{APP_UUID}/stop",
            "abc\\def" + "x" * 20,
            "..",
            "kg8wsw4ks0kc0c4goc8g4gss.json",
            "kg8wsw4ks0kc0c4goc8g4gss%2F",
        ],
    )
    def test_rejects_path_characters(self, value):
        with pytest.raises(ValidationError, match="forbidden characters"):
            validate_uuid(value)

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-uuid",
            "a" * 19,
            "a" * 29,
            "550e8400-e29b-11d4-a716-446655440000",  # v1
            "550e8400-e29b-41d4-c716-446655440000",  # bad variant
            "kg8wsw4ks0kc0c4goc8g4gs-",
        ],
    )
    def test_rejects_bad_format(self, value):
        with pytest.raises(ValidationError, match="format"):
            validate_uuid(value)

    @pytest.mark.parametrize("value", [None, "", 123, ["x"]])
    def test_rejects_missing(self, value):
        with pytest.raises(ValidationError, match="required"):
            validate_uuid(value)

    def test_message_names_field_not_value(self):
        with pytest.raises(ValidationError) as exc:
            validate_uuid("<script>alert(1)</script>", field="applicationUuid")
        assert "applicationUuid" in str(exc.value)
        assert "<script>" not in str(exc.value)


# ─── Log options ────────────────────────────────────────────────

class TestValidateLogOptions:
    def test_defaults(self):
        q = validate_log_options({})
        assert q.lines == 100
        assert q.since == "1h"

    def test_none_means_defaults(self):
        assert validate_log_options(None) == LogQuery(lines=100, since="1h")
        assert validate_log_options({"lines": None, "since": None}).lines == 100

    @pytest.mark.parametrize("lines,expected", [(1, 1), (10000, 10000), ("250", 250), (50.0, 50), (" 7 ", 7)])
    def test_lines_coerced(self, lines, expected):
        assert validate_log_options({"lines": lines}).lines == expected

    @pytest.mark.parametrize("lines", [0, -5, 10001, "abc", "", float("nan"), 2.5, True, [10]])
    def test_lines_rejected(self, lines):
        with pytest.raises(ValidationError, match="lines"):
            validate_log_options({"lines": lines})

    @pytest.mark.parametrize("since", ["5m", "2h", "1d", "30s", "120m"])
    def test_since_accepted(self, since):
        assert validate_log_options({"since": since}).since == since

    @pytest.mark.parametrize("since", ["5 m", "m5", "5", "5w", "1h;rm", "5m\n", "", 5])
    def test_since_rejected(self, since):
        with pytest.raises(ValidationError, match="since"):
            validate_log_options({"since": since})

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError):
            validate_log_options(["lines", 5])

    def test_as_params(self):
        assert validate_log_options({"lines": "20", "since": "5m"}).as_params() == {"lines": 20, "since": "5m"}


# ─── Webhooks ───────────────────────────────────────────────────

class TestValidateWebhookPayload:
    def test_valid_payload_trimmed(self):
        spec = validate_webhook_payload({"name": "  My Hook ", "url": "https://example.com/x"})
        assert spec.name == "My Hook"
        assert spec.url == "https://example.com/x"
        assert spec.secret is None

    def test_spec_example(self):
        spec = validate_webhook_payload({"name": "My Hook", "url": "https://example.com/x"})
        assert spec.model_dump() == {"name": "My Hook", "url": "https://example.com/x", "secret": None}

    def test_secret_kept_and_extras_ignored(self):
        spec = validate_webhook_payload(
            {"name": "deploy_hook-1", "url": "http://hooks.local:9000/in", "secret": "s3cret", "applicationUuid": APP_UUID}
        )
        assert spec.as_body() == {"name": "deploy_hook-1", "url": "http://hooks.local:9000/in", "secret": "s3cret"}

    def test_body_omits_missing_secret(self):
        spec = validate_webhook_payload({"name": "a", "url": "https://x"})
        assert "secret" not in spec.as_body()

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "<script>", "url": "https://x"},
            {"name": "   ", "url": "https://x"},
            {"name": "a" * 101, "url": "https://x"},
            {"name": "a;b", "url": "https://x"},
            {"url": "https://x"},
            {"name": 5, "url": "https://x"},
        ],
    )
    def test_bad_name(self, payload):
        with pytest.raises(ValidationError, match="name"):
            validate_webhook_payload(payload)

    @pytest.mark.parametrize("url", ["ftp://x", "example.com/x", "/relative", "javascript:alert(1)", "", None, 42])
    def test_bad_url(self, url):
        with pytest.raises(ValidationError, match="url"):
            validate_webhook_payload({"name": "a", "url": url})

    def test_bad_secret(self):
        with pytest.raises(ValidationError, match="secret"):
            validate_webhook_payload({"name": "a", "url": "https://x", "secret": 123})

    @pytest.mark.parametrize("payload", [None, "name=a", ["a"]])
    def test_not_a_mapping(self, payload):
        with pytest.raises(ValidationError, match="object"):
            validate_webhook_payload(payload)

    def test_message_does_not_echo_input(self):
        with pytest.raises(ValidationError) as exc:
            validate_webhook_payload({"name": "<img onerror=x>", "url": "https://x"})
        assert "<img" not in str(exc.value)


# ─── Token ──────────────────────────────────────────────────────

class TestValidateToken:
    def test_valid(self):
        assert validate_token(TOKEN) == TOKEN

    @pytest.mark.parametrize("token", ["a" * 19, "a" * 501, "", None, 12345678901234567890])
    def test_length_or_type(self, token):
        with pytest.raises(AuthConfigError):
            validate_token(token)

    @pytest.mark.parametrize("ch", ["<", ">", '"', "'", "&", "\r", "\n", "\t"])
    def test_forbidden_characters(self, ch):
        with pytest.raises(AuthConfigError, match="forbidden"):
            validate_token("a" * 30 + ch)

    def test_is_config_error(self):
        assert issubclass(AuthConfigError, ConfigError)


# ─── Token path ─────────────────────────────────────────────────

class TestValidateTokenPath:
    def test_inside_allowed_dir(self, tmp_path):
        target = tmp_path / "secrets" / "token"
        assert validate_token_path(str(target), [tmp_path]) == target.resolve()

    def test_outside_allowed_dir(self, tmp_path):
        with pytest.raises(ConfigError):
            validate_token_path("/etc/passwd", [tmp_path])

    def test_traversal(self, tmp_path):
        allowed = tmp_path / "allowed"
        allowed.mkdir()
        with pytest.raises(ConfigError):
            validate_token_path(str(allowed / ".." / "token"), [allowed])

    def test_directory_itself_rejected(self, tmp_path):
        with pytest.raises(ConfigError):
            validate_token_path(str(tmp_path), [tmp_path])

    def test_symlink_escape(self, tmp_path):
        allowed = tmp_path / "allowed"
        allowed.mkdir()
        outside = tmp_path / "outside-token"
        outside.write_text(TOKEN)
        link = allowed / "token"
        os.symlink(outside, link)
        with pytest.raises(ConfigError):
            validate_token_path(str(link), [allowed])

    @pytest.mark.parametrize("path", ["", "   ", None])
    def test_empty(self, path):
        with pytest.raises(ConfigError):
            validate_token_path(path, ["/"])

    def test_default_allow_list_includes_root(self):
        assert validate_token_path("/root/.coolify-token").name == ".coolify-token"
