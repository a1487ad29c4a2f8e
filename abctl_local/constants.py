# /*
# Copyright 2026 The abctl Authors.
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
# */

"""Constants for cluster, chart, and registry defaults."""

from __future__ import annotations

from pathlib import Path

# -- Providers --
PROVIDER_KIND = "kind"
PROVIDER_TEST = "test"

# -- Cluster defaults --
DEFAULT_CLUSTER_NAME = "airbyte-abctl"
TEST_CLUSTER_NAME = "test-airbyte-abctl"
DEFAULT_NODE_IMAGE = "kindest/node:v1.29.2"
DEFAULT_COMMAND_TIMEOUT_SECONDS = 600
DEFAULT_DATA_DIR = Path.home() / ".airbyte" / "abctl" / "data"
CONTROL_PLANE_SUFFIX = "-control-plane"
NODE_DATA_PATH = "/var/local-path-provisioner"
LABEL_INGRESS_READY = "ingress-ready=true"

# -- Ingress --
DEFAULT_INGRESS_PORT = 8000
DEFAULT_INGRESS_HOST = "localhost"
INGRESS_CONTAINER_PORT = "80/tcp"

# -- Volume mounts --
VOLUME_SPEC_SEPARATOR = ":"

# -- Chart --
CHART_VERSION_LATEST = "latest"
HELM_REPO_AIRBYTE = "airbyte"
HELM_REPO_AIRBYTE_URL = "https://airbytehq.github.io/helm-charts"
HELM_CHART_AIRBYTE = "airbyte/airbyte"
HELM_RELEASE_AIRBYTE = "airbyte-abctl"
HELM_REPO_NGINX = "ingress-nginx"
HELM_REPO_NGINX_URL = "https://kubernetes.github.io/ingress-nginx"
HELM_CHART_NGINX = "ingress-nginx/ingress-nginx"
HELM_RELEASE_NGINX = "ingress-nginx"
NS_AIRBYTE = "airbyte-abctl"
NS_INGRESS_NGINX = "ingress-nginx"

# -- Helm value keys --
HELM_KEY_IMAGE_PULL_SECRET = "global.imagePullSecrets[0].name"
HELM_KEY_AUTH_ENABLED = "global.auth.enabled"
HELM_KEY_AUTH_SECURITY_COOKIE_SECURE = "global.auth.cookieSecureSetting"
HELM_KEY_JOBS_RESOURCES_CPU = "global.jobs.resources.requests.cpu"
HELM_KEY_JOBS_RESOURCES_MEMORY = "global.jobs.resources.requests.memory"
HELM_KEY_AIRBYTE_URL = "global.airbyteUrl"

# -- Registry --
DEFAULT_DOCKER_SERVER = "https://index.docker.io/v1/"
IMAGE_PULL_SECRET_NAME = "docker-auth"

# -- Environment variables --
ENV_PREFIX = "ABCTL_"
ENV_REGISTRY_PREFIX = "ABCTL_LOCAL_INSTALL_DOCKER_"
ENV_DOCKER_SERVER = f"{ENV_REGISTRY_PREFIX}SERVER"
ENV_DOCKER_USER = f"{ENV_REGISTRY_PREFIX}USERNAME"
ENV_DOCKER_PASS = f"{ENV_REGISTRY_PREFIX}PASSWORD"
ENV_DOCKER_EMAIL = f"{ENV_REGISTRY_PREFIX}EMAIL"
ENV_BASIC_AUTH_USER = "ABCTL_LOCAL_INSTALL_USERNAME"
ENV_BASIC_AUTH_PASS = "ABCTL_LOCAL_INSTALL_PASSWORD"

# -- Docker compose migration --
COMPOSE_DB_VOLUME = "airbyte_db"
MIGRATE_IMAGE = "busybox:latest"
MIGRATE_DEST_DIR = "airbyte-volume-db/pgdata"

# -- Telemetry --
TELEMETRY_OP_INSTALL = "install"

# -- Error stages --
STAGE_VALIDATION = "validation"
STAGE_PRE_CHECK = "pre-check"
STAGE_CLUSTER_LOOKUP = "cluster lookup"
STAGE_PORT_INTROSPECTION = "port introspection"
STAGE_CLUSTER_CREATION = "cluster creation"
STAGE_INSTALL = "install"
