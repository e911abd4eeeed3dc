from __future__ import annotations

from hackjudge.util.security import issue_session_token, token_from_headers, verify_session_token


def test_session_token_round_trip():
    token = issue_session_token(user_id="user.with.dots", secret="s3cret")
    check = verify_session_token(token=token, secret="s3cret")
    assert check.ok is True
    assert check.user_id == "user.with.dots"


def test_session_token_rejects_tampering():
    token = issue_session_token(user_id="alice", secret="s3cret")
    forged = "mallory" + token[len("alice"):]
    assert verify_session_token(token=forged, secret="s3cret").reason == "session_signature_mismatch"
    assert verify_session_token(token=token, secret="other").ok is False
    assert verify_session_token(token=None, secret="s3cret").reason == "missing_session_token"
    assert verify_session_token(token="no-signature", secret="s3cret").reason == "invalid_session_token_format"


def test_token_from_headers_prefers_session_header():
    assert token_from_headers(session_header="a.b", authorization="Bearer c.d") == "a.b"
    assert token_from_headers(session_header=None, authorization="Bearer c.d") == "c.d"
    assert token_from_headers(session_header=None, authorization="Basic xyz") is None
