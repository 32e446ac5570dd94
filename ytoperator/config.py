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

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session, SQLModel

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="YTOP_", env_file=".env", extra="ignore")

    # Kubernetes
    namespace: str = "default"
    kube_request_timeout: float = 30.0
    crd_group: str = "cluster.ytsaurus.tech"
    crd_version: str = "v1"
    crd_plural: str = "ytsaurus"

    # Persistent cluster records and conditions
    database_url: str = "sqlite:///ytoperator.db"

    # Celery
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"
    reconcile_interval: float = 30.0

    # Administrative client
    admin_client_timeout: float = 30.0


settings = Settings()


def get_sync_database_url():
    """Convert async database URL to sync version for celery"""
    url = settings.database_url
    if url.startswith("postgresql+asyncpg://"):
        return url.replace("postgresql+asyncpg://", "postgresql://")
    elif url.startswith("sqlite+aiosqlite://"):
        return url.replace("sqlite+aiosqlite://", "sqlite://")
    return url


sync_engine = create_engine(get_sync_database_url())
SyncSessionLocal = sessionmaker(bind=sync_engine, class_=Session, expire_on_commit=False)


def get_sync_session():
    """Yield a synchronous database session, closing it afterwards"""
    session = SyncSessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db(engine=None):
    """Create cluster record and condition tables if they are missing"""
    # Import models so that they are registered on the metadata
    from ytoperator.db import models  # noqa: F401

    SQLModel.metadata.create_all(engine or sync_engine)
    logger.info("Database tables initialized")
