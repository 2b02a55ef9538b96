"""
Access intent models.

A ClientIntents object is declared by a client workload and lists the
resources it calls along with the permissions it needs on each.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cloudintents.naming import formatted_identity

SERVER_LABEL_KEY = "intents.cloudintents.io/server"

WILDCARD = "*"


@dataclass(frozen=True)
class Intent:
    """Permission request on a single named resource."""

    name: str  # Target resource name, may end with a single "*"
    permissions: list[str] = field(default_factory=list)


@dataclass
class ClientIntents:
    """Intents declared by a client service in a namespace."""

    name: str
    namespace: str
    service_name: str
    calls: list[Intent] = field(default_factory=list)

    def build_pod_label_selector(self) -> str:
        """Label selector matching the pods of the declared service."""
        return f"{SERVER_LABEL_KEY}={formatted_identity(self.service_name, self.namespace)}"
