"""Unit tests for agent API key authentication."""

from linkclaws.compliance.auth import (
    API_KEY_PREFIX_LENGTH,
    api_key_prefix,
    authenticate_agent,
    hash_api_key,
)


class TestApiKeyHelpers:

    def test_hash_is_sha256_hex(self):
        digest = hash_api_key("lc_abc")
        assert len(digest) == 64
        assert digest == hash_api_key("lc_abc")
        assert digest != hash_api_key("lc_abd")

    def test_prefix_length(self):
        assert api_key_prefix("lc_0123456789abcdef") == "lc_01234567"
        assert len(api_key_prefix("lc_0123456789abcdef")) == API_KEY_PREFIX_LENGTH


class TestAuthenticateAgent:

    def test_valid_key(self, store, make_agent):
        agent = make_agent(raw_key="lc_validkey_0001")

        assert authenticate_agent(store, "lc_validkey_0001").id == agent.id

    def test_wrong_key_with_same_prefix(self, store, make_agent):
        make_agent(raw_key="lc_validkey_0001")

        assert authenticate_agent(store, "lc_validkey_9999") is None

    def test_missing_or_unknown_key(self, store, make_agent):
        make_agent(raw_key="lc_validkey_0001")

        assert authenticate_agent(store, None) is None
        assert authenticate_agent(store, "") is None
        assert authenticate_agent(store, "lc_otherkey_0001") is None

    def test_soft_deleted_agent_rejected(self, store, make_agent, now):
        make_agent(raw_key="lc_deleted_0001", deleted_at=now)

        assert authenticate_agent(store, "lc_deleted_0001") is None

    def test_anonymized_agent_rejected(self, store, make_agent, now):
        make_agent(raw_key="lc_anonym_00001", anonymized_at=now)

        assert authenticate_agent(store, "lc_anonym_00001") is None
