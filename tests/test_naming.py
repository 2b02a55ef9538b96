"""Tests for length-limited name generation."""

import hashlib

import pytest
from cloudintents.naming import (
    HASH_SUFFIX_LENGTH,
    MAX_DISPLAY_NAME_LENGTH,
    MAX_GCP_NAME_LENGTH,
    MAX_K8S_LABEL_LENGTH,
    formatted_identity,
    truncate_hash_name,
)


class TestTruncateHashName:
    """Tests for truncate_hash_name()."""

    def test_short_name_unchanged(self):
        assert truncate_hash_name("ci-prod-checkout", 30) == "ci-prod-checkout"

    def test_name_at_limit_unchanged(self):
        name = "a" * 30
        assert truncate_hash_name(name, 30) == name

    def test_long_name_truncated_to_limit(self):
        name = "ci-my-cluster-production-checkout-service"
        result = truncate_hash_name(name, 30)

        assert len(result) == 30
        assert result.startswith("ci-my-cluster-productio-")

    def test_suffix_is_hash_of_original(self):
        name = "x" * 120
        result = truncate_hash_name(name, MAX_DISPLAY_NAME_LENGTH)

        expected = hashlib.sha256(name.encode()).hexdigest()[:HASH_SUFFIX_LENGTH]
        assert result.endswith(f"-{expected}")

    def test_deterministic(self):
        name = "ci-cluster-" + "namespace-" * 20
        assert truncate_hash_name(name, 50) == truncate_hash_name(name, 50)

    def test_shared_prefix_stays_distinct(self):
        """Names that only differ after the cut point get different hashes."""
        first = "ci-cluster-payments-" + "a" * 40 + "-reader"
        second = "ci-cluster-payments-" + "a" * 40 + "-writer"

        assert first[:23] == second[:23]
        assert truncate_hash_name(first, 30) != truncate_hash_name(second, 30)

    def test_idempotent(self):
        name = "ci-" + "long-name-" * 15
        once = truncate_hash_name(name, MAX_GCP_NAME_LENGTH)
        assert truncate_hash_name(once, MAX_GCP_NAME_LENGTH) == once

    def test_chained_ceilings(self):
        """Display name output feeds the stricter GCP ceiling."""
        name = "ci-cluster-" + "namespace-" * 12
        display = truncate_hash_name(name, MAX_DISPLAY_NAME_LENGTH)
        account = truncate_hash_name(display, MAX_GCP_NAME_LENGTH)

        assert len(display) == MAX_DISPLAY_NAME_LENGTH
        assert len(account) == MAX_GCP_NAME_LENGTH
        assert account[:23] == display[:23]

    def test_limit_too_small(self):
        with pytest.raises(ValueError):
            truncate_hash_name("a-much-longer-name", 5)


class TestFormattedIdentity:
    """Tests for formatted_identity()."""

    def test_short_parts(self):
        result = formatted_identity("checkout", "production")

        assert result.startswith("checkout-production-")
        assert len(result) == len("checkout-production-") + HASH_SUFFIX_LENGTH

    def test_long_parts_fit_label(self):
        result = formatted_identity("s" * 80, "n" * 80)
        assert len(result) <= MAX_K8S_LABEL_LENGTH

    def test_distinguishes_namespaces(self):
        assert formatted_identity("checkout", "staging") != formatted_identity(
            "checkout", "production"
        )

    def test_long_parts_sharing_prefix_differ(self):
        first = formatted_identity("checkout-service-primary-a", "production")
        second = formatted_identity("checkout-service-primary-b", "production")
        assert first != second
