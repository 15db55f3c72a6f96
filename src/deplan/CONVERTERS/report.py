# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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
Human-readable console reports for orders, groups, clusters and plans.
"""
from typing import Dict, List, Mapping

from jinja2 import Environment

from ..MODELS.deployment_order import DeployableService, DeploymentOrder
from ..MODELS.deployment_plan import DeploymentPlan

ORDER_TEMPLATE = """\
Build/Deploy Order (dependencies first):
{% for svc in services %}
{{ loop.index }}.\t{{ svc.service_name }}
\t\tRepo: {{ svc.repository }}
\t\tManifest: {{ svc.manifest }}
\t\tDevLocal: {{ svc.dev_local }}
\t\tBranch: {{ svc.branch }}
\t\tDepends on: {{ svc.depends_on | join(', ') }}
{% endfor %}"""

GROUPS_TEMPLATE = """\
# Connected Components:
{% for root, members in groups.items() %}
{{ root }}: {{ members | join(', ') }}
{% endfor %}"""

CLUSTERS_TEMPLATE = """\
{% for root, services in clusters.items() %}
Cluster {{ root }}:
{% for svc in services %}
  {{ loop.index }}. {{ svc.service_name }} ({{ svc.branch or '-' }})
{% endfor %}
---------------------------------
{% endfor %}"""

PLAN_TEMPLATE = """\
Final Deployment Plan for {{ plan.root_service }} (in topological order):
{% for svc in plan.services %}
{{ loop.index }}. {{ svc.service_name }}
   Repo: {{ svc.repository }}
   Branch: {{ svc.branch }}
   Manifest: {{ svc.manifest }}
   DevLocal: {{ svc.dev_local }}

{% endfor %}"""

_env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)


def members_by_root(equivalence: Mapping[str, str]) -> Dict[str, List[str]]:
    """
    Inverts a union mapping into root -> sorted member names.
    """
    groups: Dict[str, List[str]] = {}
    for node, root in equivalence.items():
        groups.setdefault(root, []).append(node)
    return {root: sorted(members) for root, members in sorted(groups.items())}


def render_order(order: DeploymentOrder) -> str:
    return _env.from_string(ORDER_TEMPLATE).render(services=order.deployment_order)


def render_groups(equivalence: Mapping[str, str]) -> str:
    return _env.from_string(GROUPS_TEMPLATE).render(groups=members_by_root(equivalence))


def render_clusters(clusters: Mapping[str, List[DeployableService]]) -> str:
    return _env.from_string(CLUSTERS_TEMPLATE).render(clusters=clusters)


def render_plan(plan: DeploymentPlan) -> str:
    return _env.from_string(PLAN_TEMPLATE).render(plan=plan)
