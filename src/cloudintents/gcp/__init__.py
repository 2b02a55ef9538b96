"""GCP IAM policy synthesis from access intents."""

from cloudintents.gcp.models import (
    IAMPolicyDocument,
    PolicyBinding,
    PolicyCondition,
    ResourceRef,
)
from cloudintents.gcp.policy import GCPPolicySynthesizer, condition_expression

__all__ = [
    "GCPPolicySynthesizer",
    "IAMPolicyDocument",
    "PolicyBinding",
    "PolicyCondition",
    "ResourceRef",
    "condition_expression",
]
