"""Tests for the Outcome wrapper returned by attempt()"""

import pytest
import requests

from bskyclient import (
    AuthError,
    BlueSkyError,
    BlueskyClientError,
    EmbedValidationError,
    MalformedResponseError,
    NotAuthenticatedError,
    Outcome,
    TranscodeError,
    TransportError,
    attempt,
)
from tests.conftest import POST_BODY, make_response


def _raise(exc):
    raise exc


class TestAttempt:
    def test_success_carries_value(self):
        outcome = attempt(lambda a, b=0: a + b, 2, b=3)

        assert outcome.ok
        assert outcome.kind is None
        assert outcome.value == 5
        assert outcome.unwrap() == 5

    @pytest.mark.parametrize(
        "error,kind",
        [
            (BlueSkyError(500, "InternalServerError", "boom"), "protocol"),
            (AuthError(401, "AuthenticationRequired", "Invalid identifier or password"), "protocol"),
            (NotAuthenticatedError("call login() first"), "usage"),
            (EmbedValidationError("too many images"), "usage"),
            (TranscodeError("ffmpeg failed with exit code 1"), "transcode"),
            (MalformedResponseError("missing uri"), "response"),
            (TransportError("connection refused"), "transport"),
            (BlueskyClientError("other"), "client"),
        ],
    )
    def test_captured_errors_are_classified(self, error, kind):
        outcome = attempt(_raise, error)

        assert not outcome.ok
        assert outcome.error is error
        assert outcome.kind == kind
        assert outcome.value is None

    def test_unwrap_reraises_captured_error(self):
        error = BlueSkyError(429, "RateLimitExceeded", "slow down")
        outcome = attempt(_raise, error)

        with pytest.raises(BlueSkyError) as excinfo:
            outcome.unwrap()

        assert excinfo.value is error
        assert excinfo.value.is_rate_limited

    def test_programming_errors_are_not_captured(self):
        with pytest.raises(TypeError):
            attempt(_raise, TypeError("bad argument"))

    def test_default_outcome_is_success(self):
        assert Outcome().ok


class TestAttemptWithClient:
    def test_server_error_becomes_protocol_outcome(self, authed_client, http):
        http.post.return_value = make_response(500, {"error": "InternalServerError", "message": "Oops"})

        outcome = attempt(authed_client.send_post, "hello")

        assert outcome.kind == "protocol"
        assert outcome.error.status == 500
        assert outcome.error.code == "InternalServerError"

    def test_network_failure_becomes_transport_outcome(self, client, http):
        http.post.side_effect = requests.ConnectionError("dns failure")

        outcome = attempt(client.login, "user.bsky.social", "pw")

        assert outcome.kind == "transport"
        assert isinstance(outcome.error.__cause__, requests.ConnectionError)

    def test_unauthenticated_send_becomes_usage_outcome(self, client, http):
        outcome = attempt(client.send_post, "hello")

        assert outcome.kind == "usage"
        http.post.assert_not_called()

    def test_successful_send(self, authed_client, http):
        http.post.return_value = make_response(200, POST_BODY)

        outcome = attempt(authed_client.send_post, "hello")

        assert outcome.ok
        assert outcome.value.uri == POST_BODY["uri"]
