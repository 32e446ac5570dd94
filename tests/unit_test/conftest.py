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

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from ytoperator.conditions import InMemoryConditionManager
from ytoperator.db import models  # noqa: F401
from ytoperator.schema import ClusterSnapshot, ClusterState, InstanceSpec, TabletNodesSpec, YtsaurusSpec
from ytoperator.ytconfig.generator import Generator
from tests.unit_test.fakes import FakeAPIProxy

CLUSTER_NAME = "demo"
NAMESPACE = "test-ns"
CORE_IMAGE = "ytsaurus/ytsaurus:23.2.0"


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared by every session of a test"""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def api_proxy():
    return FakeAPIProxy(namespace=NAMESPACE)


@pytest.fixture
def conditions():
    return InMemoryConditionManager()


@pytest.fixture
def cluster_spec():
    return YtsaurusSpec(
        core_image=CORE_IMAGE,
        primary_masters=InstanceSpec(instance_count=1),
        tablet_nodes=[TabletNodesSpec(instance_count=1)],
    )


@pytest.fixture
def cfgen(cluster_spec):
    return Generator(cluster_spec, CLUSTER_NAME, NAMESPACE)


@pytest.fixture
def initializing_cluster():
    return ClusterSnapshot(name=CLUSTER_NAME, namespace=NAMESPACE, cluster_state=ClusterState.INITIALIZING)


@pytest.fixture
def running_cluster():
    return ClusterSnapshot(name=CLUSTER_NAME, namespace=NAMESPACE, cluster_state=ClusterState.RUNNING)
