"""Tests for sync status classification."""

import pytest

from agentsync.adapters.remote_service import InMemoryRemoteAgentService
from agentsync.core.drift import DriftClassifier, classify
from agentsync.core.sync_controller import SyncController
from agentsync.errors import MetadataCorrupt
from agentsync.models.agent_config import AgentConfig
from agentsync.models.metadata import MetadataRecord
from agentsync.models.sync_status import (
    BothChanged,
    InSync,
    LocalChanged,
    NeverSynced,
    OutOfSync,
    RemoteChanged,
)
from agentsync.models.workspace import PRODUCTION, STAGING
from conftest import base_config_dict

LOCAL = "sha256:local"
STORED = "sha256:stored"
REMOTE = "sha256:remote"


def _record(config_hash=STORED) -> MetadataRecord:
    return MetadataRecord(
        workspace="staging",
        agent_id="agent_1",
        llm_id="llm_1",
        config_hash=config_hash,
        last_sync="2025-01-01T00:00:00Z",
    )


@pytest.fixture
def classifier(store, services, resolver) -> DriftClassifier:
    return DriftClassifier(store, services, resolver)


class TestClassify:
    def test_no_record_is_never_synced(self):
        assert isinstance(classify(LOCAL, None), NeverSynced)

    def test_record_without_hash_is_never_synced(self):
        assert isinstance(classify(LOCAL, _record(config_hash=None)), NeverSynced)

    def test_matching_hash_is_in_sync(self):
        status = classify(STORED, _record())
        assert isinstance(status, InSync)
        assert status.last_sync == "2025-01-01T00:00:00Z"

    def test_local_change_without_remote(self):
        status = classify(LOCAL, _record())
        assert isinstance(status, OutOfSync)
        assert status.reason == LocalChanged(local_hash=LOCAL)

    @pytest.mark.parametrize(
        "local, remote, expected",
        [
            (STORED, STORED, InSync),
            (LOCAL, STORED, LocalChanged),
            (STORED, REMOTE, RemoteChanged),
            (LOCAL, REMOTE, BothChanged),
        ],
    )
    def test_three_way(self, local, remote, expected):
        status = classify(local, _record(), remote)
        if expected is InSync:
            assert isinstance(status, InSync)
        else:
            assert isinstance(status.reason, expected)

    def test_both_sides_converged(self):
        """Local and remote agree even though the record is stale."""
        assert isinstance(classify(LOCAL, _record(), LOCAL), InSync)


class TestStatus:
    def test_status_without_fetch_makes_no_calls(self, controller, classifier, services, config):
        controller.push(config, "support-bot", STAGING)
        calls_before = list(services["staging"].calls)
        edited = AgentConfig.model_validate({**base_config_dict(), "agent_name": "Renamed"})

        slot_status = classifier.status(edited, "support-bot", STAGING).value

        assert isinstance(slot_status.status.reason, LocalChanged)
        assert slot_status.remote_hash is None
        assert services["staging"].calls == calls_before

    def test_in_sync_after_push(self, controller, classifier, config):
        controller.push(config, "support-bot", STAGING)
        slot_status = classifier.status(config, "support-bot", STAGING, fetch_remote=True).value
        assert isinstance(slot_status.status, InSync)
        assert slot_status.remote_hash == slot_status.stored_hash

    def test_remote_edit_detected(self, controller, classifier, services, config):
        pushed = controller.push(config, "support-bot", STAGING).value
        services["staging"].agents[pushed.agent_id]["voice_id"] = "11labs-Dorothy"

        slot_status = classifier.status(config, "support-bot", STAGING, fetch_remote=True).value

        assert isinstance(slot_status.status.reason, RemoteChanged)

    def test_conflict_detected(self, controller, classifier, services, config):
        pushed = controller.push(config, "support-bot", STAGING).value
        services["staging"].llms[pushed.llm_id]["temperature"] = 0.1
        edited = AgentConfig.model_validate({**base_config_dict(), "agent_name": "Renamed"})

        slot_status = classifier.status(edited, "support-bot", STAGING, fetch_remote=True).value

        assert isinstance(slot_status.status.reason, BothChanged)

    def test_never_synced_skips_fetch(self, classifier, services, config):
        slot_status = classifier.status(config, "support-bot", STAGING, fetch_remote=True).value
        assert isinstance(slot_status.status, NeverSynced)
        assert services["staging"].calls == []

    def test_corrupt_record_is_err(self, classifier, config, tmp_path):
        agent_dir = tmp_path / "agents" / "support-bot"
        agent_dir.mkdir(parents=True, exist_ok=True)
        (agent_dir / "staging.json").write_text("[]")
        result = classifier.status(config, "support-bot", STAGING)
        assert isinstance(result.error, MetadataCorrupt)


class TestStatusAll:
    def test_each_slot_reported(self, controller, classifier, config):
        controller.push(config, "support-bot", STAGING)

        statuses = classifier.status_all(config, "support-bot", [STAGING, PRODUCTION])

        assert set(statuses) == {"staging", "production"}
        assert isinstance(statuses["staging"].value.status, InSync)
        assert isinstance(statuses["production"].value.status, NeverSynced)

    def test_one_failing_slot_does_not_hide_others(self, controller, classifier, config, tmp_path):
        controller.push(config, "support-bot", STAGING)
        (tmp_path / "agents" / "support-bot" / "production.json").write_text("{")

        statuses = classifier.status_all(config, "support-bot", [STAGING, PRODUCTION])

        assert statuses["staging"].ok
        assert not statuses["production"].ok


class DefaultFillingService(InMemoryRemoteAgentService):
    """A remote that stores server-side defaults on create, like real platforms do."""

    def create_agent(self, payload):
        agent = super().create_agent(payload)
        self.agents[agent.agent_id].update({"voice_temperature": 1.0, "enable_backchannel": True})
        return agent


class TestPlatformDefaults:
    def test_clean_push_reads_in_sync(self, store, resolver, config):
        """Defaults the remote fills in for unset fields are not drift."""
        services = {"staging": DefaultFillingService()}
        controller = SyncController(store, services, resolver)
        classifier = DriftClassifier(store, services, resolver)

        assert controller.push(config, "support-bot", STAGING).ok
        slot_status = classifier.status(config, "support-bot", STAGING, fetch_remote=True).value

        assert isinstance(slot_status.status, InSync)
