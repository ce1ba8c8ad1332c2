"""Tests for the local <-> remote config transformation."""

import time

import pytest
from pydantic import ValidationError

from agentsync.adapters.section_resolvers import MappingSectionResolver
from agentsync.core.hashing import calculate_hash
from agentsync.core.prompt_composer import build_llm_prompt
from agentsync.core.transformer import (
    _recover_static_values,
    from_remote,
    to_remote_agent,
    to_remote_llm,
)
from agentsync.errors import ConfigInvalid
from agentsync.models.agent_config import AgentConfig, DeferToRuntime, LiteralValue
from agentsync.models.remote import RemoteAgent, RemoteLlm


def _remote_pair(config: AgentConfig, resolver, llm_id="llm_1", agent_id="agent_1"):
    """Simulate what the remote service stores for a pushed config."""
    composed = build_llm_prompt(config.llm_config, resolver)
    llm_body = to_remote_llm(config, composed).model_dump(mode="json", exclude_unset=True)
    agent_body = to_remote_agent(config, llm_id).model_dump(mode="json", exclude_unset=True)
    return (
        RemoteLlm.model_validate({**llm_body, "llm_id": llm_id, "version": 0}),
        RemoteAgent.model_validate({**agent_body, "agent_id": agent_id, "version": 0}),
    )


class TestToRemote:
    def test_llm_payload(self, config, resolver):
        payload = to_remote_llm(config, build_llm_prompt(config.llm_config, resolver))
        assert payload.model == "gpt-4o"
        assert payload.temperature == 0.7
        assert payload.general_prompt == "Hello from Acme, ask {{caller_name}}"

    def test_llm_payload_omits_unset_fields(self, config, resolver):
        """Fields the config omits stay out of the request body."""
        payload = to_remote_llm(config, build_llm_prompt(config.llm_config, resolver))
        body = payload.model_dump(exclude_unset=True)
        assert "begin_message" not in body
        assert "tools" not in body

    def test_agent_payload_references_llm(self, config):
        payload = to_remote_agent(config, "llm_abc")
        assert payload.response_engine.llm_id == "llm_abc"
        assert payload.response_engine.type == "retell-llm"
        assert payload.agent_name == "Acme Receptionist"
        assert payload.language == "en-US"

    def test_agent_payload_requires_llm_id(self, config):
        """The agent payload cannot exist without a concrete LLM id."""
        with pytest.raises(ValidationError):
            to_remote_agent(config, "")

    def test_explicit_null_is_sent(self, config_dict):
        """An explicit null webhook is carried so the remote value is cleared."""
        config_dict["webhook_url"] = None
        payload = to_remote_agent(AgentConfig.model_validate(config_dict), "llm_1")
        body = payload.model_dump(exclude_unset=True)
        assert "webhook_url" in body and body["webhook_url"] is None


class TestFromRemoteWithoutHint:
    def test_flattens_prompt(self, config, resolver):
        """Without a hint the remote prompt is stored as a flat string."""
        llm, agent = _remote_pair(config, resolver)
        rebuilt = from_remote(llm, agent)

        assert rebuilt.llm_config.prompt_config is None
        assert rebuilt.llm_config.general_prompt == "Hello from Acme, ask {{caller_name}}"
        assert rebuilt.voice_id == config.voice_id
        assert rebuilt.llm_config.temperature == 0.7

    def test_invalid_remote_state(self, config, resolver):
        llm, agent = _remote_pair(config, resolver)
        broken = agent.model_copy(update={"language": "english"})
        with pytest.raises(ConfigInvalid):
            from_remote(llm, broken)


class TestFromRemoteWithHint:
    def test_unchanged_remote_round_trips_exactly(self, config, resolver):
        """With no remote edits the rebuilt config hashes like the local one."""
        llm, agent = _remote_pair(config, resolver)
        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)
        assert calculate_hash(rebuilt) == calculate_hash(config)

    def test_scalar_changes_are_picked_up(self, config, resolver):
        llm, agent = _remote_pair(config, resolver)
        agent = RemoteAgent.model_validate({**agent.model_dump(), "voice_id": "11labs-Bella"})
        llm = llm.model_copy(update={"temperature": 0.2})

        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)
        assert rebuilt.voice_id == "11labs-Bella"
        assert rebuilt.llm_config.temperature == 0.2

    def test_static_value_refreshed(self, config, resolver):
        """A remote edit confined to a static value keeps sections and refreshes the value."""
        llm, agent = _remote_pair(config, resolver)
        llm = llm.model_copy(update={"general_prompt": "Hello from Globex, ask {{caller_name}}"})

        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)
        prompt_config = rebuilt.llm_config.prompt_config
        assert prompt_config.sections == ["greeting"]
        assert prompt_config.variables["company"] == LiteralValue(value="Globex")
        assert calculate_hash(rebuilt) != calculate_hash(config)

    def test_deferred_variable_untouched(self, config_dict):
        config_dict["llm_config"]["prompt_config"]["variables"]["tier"] = "OVERRIDE"
        resolver = MappingSectionResolver({"greeting": "{{company}} for {{tier}}"})
        config = AgentConfig.model_validate(config_dict)
        llm, agent = _remote_pair(config, resolver)

        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)
        assert isinstance(rebuilt.llm_config.prompt_config.variables["tier"], DeferToRuntime)

    def test_structural_edit_falls_back_to_flat(self, config, resolver):
        """If the template cannot produce the remote prompt, no sections are invented."""
        llm, agent = _remote_pair(config, resolver)
        llm = llm.model_copy(update={"general_prompt": "Completely rewritten prompt"})

        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)
        assert rebuilt.llm_config.prompt_config is None
        assert rebuilt.llm_config.general_prompt == "Completely rewritten prompt"

    def test_omitted_fields_stay_omitted(self, config, resolver):
        """Remote nulls for fields the hint omits do not become explicit nulls."""
        llm, agent = _remote_pair(config, resolver)
        agent = RemoteAgent.model_validate({**agent.model_dump(), "webhook_url": None})

        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)
        assert "webhook_url" not in rebuilt.model_fields_set

    def test_platform_defaults_not_merged(self, config, resolver):
        """Remote values for fields the hint never set are left out of the rebuilt config."""
        llm, agent = _remote_pair(config, resolver)
        agent = RemoteAgent.model_validate(
            {**agent.model_dump(), "voice_temperature": 1.0, "enable_backchannel": True}
        )

        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)

        assert "voice_temperature" not in rebuilt.model_fields_set
        assert calculate_hash(rebuilt) == calculate_hash(config)

    def test_unmatched_prompt_with_many_static_values_is_fast(self, config_dict):
        """A remote prompt that no longer fits many static slots is rejected in linear time."""
        names = [f"v{i}" for i in range(8)]
        config_dict["llm_config"]["prompt_config"]["variables"] = {name: "a" for name in names}
        resolver = MappingSectionResolver(
            {"greeting": " ".join("{{" + name + "}}" for name in names) + " END"}
        )
        config = AgentConfig.model_validate(config_dict)
        llm, agent = _remote_pair(config, resolver)
        llm = llm.model_copy(update={"general_prompt": "x " * 60 + "NOPE"})

        started = time.perf_counter()
        rebuilt = from_remote(llm, agent, hint=config, resolver=resolver)

        assert time.perf_counter() - started < 1.0
        assert rebuilt.llm_config.prompt_config is None
        assert rebuilt.llm_config.general_prompt == "x " * 60 + "NOPE"


class TestRecoverStaticValues:
    def test_values_between_text(self):
        values = _recover_static_values(
            "Hi {{name}} from {{company}}!",
            {"name": "Ann", "company": "Acme"},
            "Hi Bob from Globex Corp!",
        )
        assert values == {"name": "Bob", "company": "Globex Corp"}

    def test_repeated_token_must_agree(self):
        literals = {"company": "Acme"}
        template = "{{company}} and {{company}}"
        assert _recover_static_values(template, literals, "Globex and Globex") == {"company": "Globex"}
        assert _recover_static_values(template, literals, "Globex and Initech") is None

    def test_non_static_tokens_match_literally(self):
        template = "Call {{caller_name}} about {{company}}"
        literals = {"company": "Acme"}
        assert _recover_static_values(template, literals, "Call {{caller_name}} about Globex") == {
            "company": "Globex"
        }
        assert _recover_static_values(template, literals, "Call Bob about Globex") is None

    def test_trailing_text_anchored_at_end(self):
        values = _recover_static_values("{{a}}. Done.", {"a": "x"}, "One. Two. Done.")
        assert values == {"a": "One. Two"}

    def test_extra_text_rejected(self):
        assert _recover_static_values("Hi {{a}}", {"a": "x"}, "Hello Bob") is None
