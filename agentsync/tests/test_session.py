"""End-to-end tests through the session API against in-memory services."""

import json

import pytest

from agentsync.adapters.remote_service import InMemoryRemoteAgentService
from agentsync.core.hashing import calculate_hash
from agentsync.errors import ConfigInvalid
from agentsync.models.sync_status import InSync, NeverSynced
from agentsync.sdk.agent_files import load_agent_config, save_agent_config
from agentsync.sdk.session import open_session
from conftest import FIXTURES


@pytest.fixture
def session(agents_dir, services):
    return open_session(agents_dir, FIXTURES / "prompts", services=services)


class TestAgentFiles:
    def test_load_fixture_agent(self, agents_dir):
        config = load_agent_config(agents_dir / "support-bot")
        assert config.agent_name == "Support Bot"
        assert config.llm_config.prompt_config.sections == ["greeting", "support/escalation"]

    def test_missing_agent(self, tmp_path):
        with pytest.raises(ConfigInvalid):
            load_agent_config(tmp_path / "ghost")

    def test_malformed_json(self, tmp_path):
        (tmp_path / "agent.json").write_text("{")
        with pytest.raises(ConfigInvalid):
            load_agent_config(tmp_path)

    def test_schema_violation_lists_errors(self, tmp_path, config_dict):
        config_dict["voice_speed"] = 5
        (tmp_path / "agent.json").write_text(json.dumps(config_dict))
        with pytest.raises(ConfigInvalid) as exc_info:
            load_agent_config(tmp_path)
        assert exc_info.value.details["errors"][0]["loc"] == ("voice_speed",)

    def test_save_then_load(self, tmp_path, config):
        save_agent_config(tmp_path / "new-agent", config)
        assert calculate_hash(load_agent_config(tmp_path / "new-agent")) == calculate_hash(config)


class TestSession:
    def test_push_status_and_pull(self, session, services, agents_dir):
        pushed = session.push("support-bot", "staging")
        assert pushed.ok

        llm = services["staging"].llms[pushed.value.llm_id]
        assert llm["general_prompt"] == (
            "Hello from Acme, ask {{caller_name}}\n"
            "Escalate {{customer_tier}} callers about order {{order_id}} to a Acme supervisor."
        )

        statuses = session.status("support-bot", ["staging", "production"], fetch_remote=True).value
        assert isinstance(statuses["staging"].value.status, InSync)
        assert isinstance(statuses["production"].value.status, NeverSynced)

        pulled = session.pull("support-bot", "staging", write=True)
        assert pulled.ok
        reloaded = load_agent_config(agents_dir / "support-bot")
        assert reloaded.llm_config.prompt_config.sections == ["greeting", "support/escalation"]

    def test_metadata_written_beside_agent(self, session, agents_dir):
        session.push("support-bot", "staging")
        record = json.loads((agents_dir / "support-bot" / "staging.json").read_text())
        assert record["workspace"] == "staging"
        assert record["config_hash"].startswith("sha256:")

    def test_production_gate_through_session(self, session):
        result = session.push("support-bot", "production")
        assert result.error.kind == "StagingRequired"

    def test_unknown_agent(self, session):
        result = session.push("ghost", "staging")
        assert isinstance(result.error, ConfigInvalid)

    def test_validate_reports_variables(self, session):
        report = session.validate("support-bot").value
        assert [v.name for v in report.summary.dynamic] == ["order_id"]
        assert [v.name for v in report.summary.system] == ["caller_name"]
        assert report.unused_variables == []

    def test_default_services_from_settings(self, agents_dir, tmp_path, monkeypatch):
        from agentsync.config.settings import load_workspaces

        monkeypatch.chdir(tmp_path)
        settings = load_workspaces(
            env={"RETELL_STAGING_API_KEY": "s", "RETELL_PRODUCTION_API_KEY": "p"}
        )
        session = open_session(agents_dir, settings=settings)
        services = session.controller.services
        assert set(services) == {"staging", "production"}
        assert not isinstance(services["staging"], InMemoryRemoteAgentService)
        assert services["production"].api_key == "p"
