"""
Tests for the server's command line.
"""

import server


def test_defaults(monkeypatch):
    monkeypatch.delenv("STATHAT_ACCESSTOKEN", raising=False)
    args = server.parse_args([])

    assert args.host == "0.0.0.0"
    assert args.port == 6070
    assert args.token == ""
    assert args.timeout == 30.0
    assert args.log_level == "INFO"


def test_token_from_env(monkeypatch):
    monkeypatch.setenv("STATHAT_ACCESSTOKEN", "abc")
    assert server.parse_args([]).token == "abc"
    assert server.parse_args(["--token", "xyz"]).token == "xyz"


def test_token_required(monkeypatch):
    monkeypatch.delenv("STATHAT_ACCESSTOKEN", raising=False)
    assert server.main([]) == 1
