# Copyright 2025 ApeCloud, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for the one-shot init job.

The job is driven one call at a time, with a fresh fetch before every call, the
way the orchestrator drives it across passes.
"""

import pytest

from ytoperator import consts
from ytoperator.components import InitJob, SyncStatus
from ytoperator.conditions import Condition
from ytoperator.db.models import ConditionStatus
from ytoperator.exceptions import ResourceStoreError
from ytoperator.labeller import Labeller

JOB_NAME = "yt-master-init-job-default"
CONFIG_MAP_NAME = "default-yt-master-init-job-config"
CONDITION = "defaultMasterInitJobCompleted"


@pytest.fixture
def labeller():
    return Labeller(
        cluster_name="demo",
        namespace="test-ns",
        component_label=consts.YT_COMPONENT_LABEL_MASTER,
        component_name="Master",
    )


@pytest.fixture
def make_job(labeller, api_proxy, conditions):
    def _make():
        job = InitJob(
            labeller,
            api_proxy,
            conditions,
            [],
            "default",
            consts.CLIENT_CONFIG_FILE_NAME,
            "ytsaurus/ytsaurus:23.2.0",
            lambda: b"{driver={}}",
        )
        job.fetch()
        job.set_init_script("echo init")
        return job

    return _make


class TestInitJobLifecycle:
    """Test suite for the init job state table."""

    def test_four_call_scenario(self, make_job, api_proxy, conditions):
        """Create, wait, record completion, then report Ready."""
        assert make_job().sync(dry=False) == SyncStatus.PENDING
        assert api_proxy.get("Job", JOB_NAME) is not None
        assert api_proxy.get("ConfigMap", CONFIG_MAP_NAME) is not None

        assert make_job().sync(dry=False) == SyncStatus.BLOCKED

        api_proxy.complete_job(JOB_NAME)
        assert make_job().sync(dry=False) == SyncStatus.PENDING
        assert conditions.is_status_condition_true(CONDITION)

        assert make_job().sync(dry=False) == SyncStatus.READY

    def test_condition_key_and_reason(self, make_job, api_proxy, conditions):
        """Completion is recorded under <name><Component>InitJobCompleted."""
        make_job().sync(dry=False)
        api_proxy.complete_job(JOB_NAME)
        make_job().sync(dry=False)

        condition = conditions.get_status_condition(CONDITION)
        assert condition.status == ConditionStatus.TRUE
        assert condition.reason == "InitJobCompleted"
        assert condition.message == "Init job successfully completed"

    def test_ready_even_if_job_disappears(self, make_job, api_proxy, conditions):
        """Once completed, the job never runs again on its own."""
        make_job().sync(dry=False)
        api_proxy.complete_job(JOB_NAME)
        make_job().sync(dry=False)

        api_proxy.delete_object("Job", JOB_NAME)
        before = len(api_proxy.mutations())

        assert make_job().sync(dry=False) == SyncStatus.READY
        assert len(api_proxy.mutations()) == before

    def test_pod_spec(self, make_job, api_proxy):
        """The job runs the init script from the mounted config map."""
        make_job().sync(dry=False)

        job = api_proxy.get("Job", JOB_NAME)
        pod_spec = job["spec"]["template"]["spec"]
        container = pod_spec["containers"][0]
        assert container["name"] == "ytsaurus-init"
        assert container["command"] == ["bash", "-c", "/config/init-cluster.sh"]
        assert pod_spec["restartPolicy"] == "OnFailure"
        assert pod_spec["volumes"][0]["configMap"] == {"name": CONFIG_MAP_NAME, "defaultMode": 0o500}

        config_map = api_proxy.get("ConfigMap", CONFIG_MAP_NAME)
        assert config_map["data"][consts.INIT_CLUSTER_SCRIPT_FILE_NAME] == "echo init"
        assert config_map["data"][consts.CLIENT_CONFIG_FILE_NAME] == "{driver={}}"


class TestInitJobDryRun:
    """Test suite for side-effect free probing."""

    @pytest.mark.parametrize("completed_before", [False, True])
    def test_dry_run_does_not_mutate(self, make_job, api_proxy, conditions, completed_before):
        """Dry runs report the same status without creating or recording anything."""
        make_job().sync(dry=False)
        if completed_before:
            api_proxy.complete_job(JOB_NAME)
        before = len(api_proxy.mutations())

        status = make_job().sync(dry=True)

        assert status == (SyncStatus.PENDING if completed_before else SyncStatus.BLOCKED)
        assert len(api_proxy.mutations()) == before
        assert not conditions.is_status_condition_true(CONDITION)

    def test_dry_run_before_creation(self, make_job, api_proxy):
        """A missing job is reported as Pending without being created."""
        assert make_job().sync(dry=True) == SyncStatus.PENDING
        assert api_proxy.mutations() == []


class TestInitJobFailures:
    """Test suite for store errors during creation."""

    def test_create_failure_does_not_set_condition(self, make_job, api_proxy, conditions):
        """A failed job creation propagates and leaves the ledger untouched."""
        api_proxy.fail("create", "Job")

        with pytest.raises(ResourceStoreError):
            make_job().sync(dry=False)

        assert conditions.get_status_condition(CONDITION) is None

        api_proxy.clear_failures()
        assert make_job().sync(dry=False) == SyncStatus.PENDING
        assert api_proxy.get("Job", JOB_NAME) is not None


class TestInitJobRestart:
    """Test suite for restarting a completed init job."""

    def _complete(self, make_job, api_proxy):
        make_job().sync(dry=False)
        api_proxy.complete_job(JOB_NAME)
        make_job().sync(dry=False)

    def test_restart_round_trip(self, make_job, api_proxy, conditions):
        """prepare_restart removes the job and flips the condition to False."""
        self._complete(make_job, api_proxy)

        job = make_job()
        assert not job.is_restart_prepared()
        job.prepare_restart(dry=False)
        assert api_proxy.get("Job", JOB_NAME) is None

        job = make_job()
        assert job.is_restart_prepared()
        assert not job.is_restart_completed()
        condition = conditions.get_status_condition(CONDITION)
        assert condition.status == ConditionStatus.FALSE
        assert condition.reason == "InitJobNeedRestart"

        assert make_job().sync(dry=False) == SyncStatus.PENDING
        api_proxy.complete_job(JOB_NAME)
        assert make_job().sync(dry=False) == SyncStatus.PENDING
        assert make_job().is_restart_completed()
        assert make_job().sync(dry=False) == SyncStatus.READY

    def test_prepare_restart_dry(self, make_job, api_proxy, conditions):
        """A dry prepare changes nothing."""
        self._complete(make_job, api_proxy)
        before = len(api_proxy.mutations())

        make_job().prepare_restart(dry=True)

        assert len(api_proxy.mutations()) == before
        assert conditions.is_status_condition_true(CONDITION)

    def test_prepare_restart_without_job(self, make_job, api_proxy, conditions):
        """Preparing a restart when the job is already gone only flips the condition."""
        conditions.set_status_condition(Condition.true(CONDITION, reason="InitJobCompleted"))

        make_job().prepare_restart(dry=False)

        assert ("delete", "Job", JOB_NAME) not in api_proxy.actions
        assert make_job().is_restart_prepared()
