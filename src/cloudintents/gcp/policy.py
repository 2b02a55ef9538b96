"""
Conditional GCP IAM policy synthesis from access intents.

Each intent becomes one binding per requested permission, granted to the
GCP service account that backs the client's Kubernetes service account and
scoped with a condition on the target resource name:

    bucket-a   → resource.name == "bucket-a"
    bucket-*   → resource.name.startsWith("bucket-")
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from cloudintents.config.settings import Settings
from cloudintents.core.errors import ConfigurationError, ValidationError
from cloudintents.gcp.models import (
    IAMPolicyDocument,
    PolicyBinding,
    PolicyCondition,
    ResourceRef,
)
from cloudintents.intents import WILDCARD, Intent
from cloudintents.naming import (
    MAX_DISPLAY_NAME_LENGTH,
    MAX_GCP_NAME_LENGTH,
    MAX_K8S_NAME_LENGTH,
    truncate_hash_name,
)

logger = structlog.get_logger()

NAME_PREFIX = "ci"
WORKLOAD_IDENTITY_ROLE = "roles/iam.workloadIdentityUser"


def _cel_string(value: str) -> str:
    """Double-quoted CEL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def condition_expression(resource_name: str) -> str:
    """
    Condition expression matching an intent's target resource name.

    Raises:
        ValidationError: Wildcard anywhere but the last character
    """
    if WILDCARD not in resource_name:
        return f"resource.name == {_cel_string(resource_name)}"

    if resource_name.index(WILDCARD) != len(resource_name) - 1:
        raise ValidationError(
            f"Wildcard in the middle of the name is not supported: {resource_name}",
            {"resource_name": resource_name},
        )
    return f"resource.name.startsWith({_cel_string(resource_name[:-1])})"


@dataclass(frozen=True)
class GCPPolicySynthesizer:
    """Builds IAM partial policies for one GCP project and cluster."""

    project_id: str
    cluster_name: str

    @classmethod
    def from_settings(cls, settings: Settings) -> GCPPolicySynthesizer:
        if not settings.gcp_project_id or not settings.cluster_name:
            raise ConfigurationError(
                "GCP project ID and cluster name must both be configured",
                {"gcp_project_id": settings.gcp_project_id, "cluster_name": settings.cluster_name},
            )
        return cls(project_id=settings.gcp_project_id, cluster_name=settings.cluster_name)

    def policy_name(self, namespace: str, service_name: str) -> str:
        name = f"{NAME_PREFIX}-{namespace}-{service_name}-intent-policy"
        return truncate_hash_name(name, MAX_K8S_NAME_LENGTH)

    def workload_identity_policy_name(self, ksa_name: str) -> str:
        name = f"{NAME_PREFIX}-{ksa_name}-gcp-identity"
        return truncate_hash_name(name, MAX_K8S_NAME_LENGTH)

    def service_account_display_name(self, namespace: str, ksa_name: str) -> str:
        name = f"{NAME_PREFIX}-{self.cluster_name}-{namespace}-{ksa_name}"
        return truncate_hash_name(name, MAX_DISPLAY_NAME_LENGTH)

    def service_account_name(self, namespace: str, ksa_name: str) -> str:
        # GCP account IDs are capped at 30 chars; derived from the display name
        display_name = self.service_account_display_name(namespace, ksa_name)
        return truncate_hash_name(display_name, MAX_GCP_NAME_LENGTH)

    def service_account_email(self, namespace: str, ksa_name: str) -> str:
        name = self.service_account_name(namespace, ksa_name)
        return f"{name}@{self.project_id}.iam.gserviceaccount.com"

    def synthesize(
        self,
        namespace: str,
        client_service_name: str,
        client_identity: str,
        intents: list[Intent],
    ) -> IAMPolicyDocument:
        """
        Build the IAM partial policy for a client's intents.

        Args:
            namespace: Client namespace
            client_service_name: Service that declared the intents
            client_identity: Kubernetes service account the client runs as
            intents: Intents in declaration order

        Returns:
            Project scoped policy with one binding per intent permission

        Raises:
            ValidationError: An intent has a misplaced wildcard; no partial
                policy is returned
        """
        member = f"serviceAccount:{self.service_account_email(namespace, client_identity)}"

        bindings: list[PolicyBinding] = []
        for intent in intents:
            condition = PolicyCondition(
                title=f"{NAME_PREFIX}-{intent.name}",
                expression=condition_expression(intent.name),
            )
            for permission in intent.permissions:
                bindings.append(
                    PolicyBinding(
                        role=f"roles/{permission}",
                        members=[member],
                        condition=condition,
                    )
                )

        policy = IAMPolicyDocument(
            name=self.policy_name(namespace, client_service_name),
            namespace=namespace,
            resource_ref=ResourceRef(kind="Project", external=self.project_id),
            bindings=bindings,
        )
        logger.debug(
            "iam_policy_synthesized",
            policy=policy.name,
            namespace=namespace,
            bindings=len(bindings),
        )
        return policy

    def synthesize_workload_identity_binding(self, namespace: str, ksa_name: str) -> IAMPolicyDocument:
        """
        Allow a Kubernetes service account to impersonate its GCP account.

        The policy is scoped to the GCP service account and grants
        roles/iam.workloadIdentityUser to the workload identity pool member
        of the Kubernetes service account.
        """
        member = f"serviceAccount:{self.project_id}.svc.id.goog[{namespace}/{ksa_name}]"
        return IAMPolicyDocument(
            name=self.workload_identity_policy_name(ksa_name),
            namespace=namespace,
            resource_ref=ResourceRef(
                kind="IAMServiceAccount",
                external=(
                    f"projects/{self.project_id}/serviceAccounts/"
                    f"{self.service_account_email(namespace, ksa_name)}"
                ),
            ),
            bindings=[PolicyBinding(role=WORKLOAD_IDENTITY_ROLE, members=[member])],
        )
