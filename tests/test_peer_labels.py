"""Tests for peer-label exclusivity."""

import pytest

from ladybug.peer_labels import exclusive_labels, peer_prefix, remove_peer_labels


class TestPeerPrefix:
    """Test namespace prefix extraction."""

    @pytest.mark.parametrize(
        ("label", "prefix"),
        [
            ("Status: Confirmed", "Status:"),
            ("area:docs", "area:"),
            ("bug", None),
            (":odd", None),
        ],
    )
    def test_prefix(self, label: str, prefix: str | None) -> None:
        """Test labels with and without a namespace."""
        assert peer_prefix(label) == prefix


class TestExclusiveLabels:
    """Test the resulting label set."""

    def test_drops_peers_keeps_others(self) -> None:
        """Test that exactly one label of the namespace remains."""
        current = ["Status: New", "bug", "Status: Confirmed", "area: ui"]
        assert exclusive_labels(current, "Status: Confirmed") == [
            "bug",
            "area: ui",
            "Status: Confirmed",
        ]

    def test_attached_missing_from_snapshot(self) -> None:
        """Test that the attached label is added if the snapshot lacks it."""
        assert exclusive_labels(["Status: New"], "Status: Done") == ["Status: Done"]

    def test_no_prefix(self) -> None:
        """Test that labels without a namespace are not handled."""
        assert exclusive_labels(["a", "b"], "bug") is None

    @pytest.mark.parametrize(
        "current",
        [
            [],
            ["ns:a"],
            ["ns:a", "ns:b", "x"],
            ["x", "y:z", "ns:value", "ns:other", "nsx"],
        ],
    )
    def test_exactly_one_in_namespace(self, current: list[str]) -> None:
        """Test the exclusivity property over several label sets."""
        result = exclusive_labels(current + ["ns:value"], "ns:value")
        assert [label for label in result if label.startswith("ns:")] == ["ns:value"]
        assert [label for label in result if not label.startswith("ns:")] == [
            label for label in current if not label.startswith("ns:")
        ]


class TestRemovePeerLabels:
    """Test handling a labeled event."""

    @pytest.mark.asyncio
    async def test_replaces_labels(self, fake_tracker, issue_factory) -> None:
        """Test a single replace call with the exclusive set."""
        issue = fake_tracker.add(
            issue_factory(1, labels=["Status: New", "bug", "Status: Confirmed"])
        )

        labels = await remove_peer_labels(True, fake_tracker, issue, "Status: Confirmed")

        assert labels == ["bug", "Status: Confirmed"]
        assert fake_tracker.methods(1) == ["replace_labels"]
        assert fake_tracker.issues[1].label_names == ["bug", "Status: Confirmed"]

    @pytest.mark.asyncio
    async def test_disabled(self, fake_tracker, issue_factory) -> None:
        """Test that peer_labels: false leaves labels alone."""
        issue = fake_tracker.add(issue_factory(1, labels=["a: 1", "a: 2"]))
        assert await remove_peer_labels(False, fake_tracker, issue, "a: 2") is None
        assert fake_tracker.calls == []

    @pytest.mark.asyncio
    async def test_no_prefix(self, fake_tracker, issue_factory) -> None:
        """Test that a label without a namespace is a no-op."""
        issue = fake_tracker.add(issue_factory(1, labels=["bug", "a: 1"]))
        assert await remove_peer_labels(True, fake_tracker, issue, "bug") is None
        assert fake_tracker.calls == []

    @pytest.mark.asyncio
    async def test_no_peers(self, fake_tracker, issue_factory) -> None:
        """Test that no call is made when no peer is attached."""
        issue = fake_tracker.add(issue_factory(1, labels=["bug", "a: 1"]))
        assert await remove_peer_labels(True, fake_tracker, issue, "a: 1") is None
        assert fake_tracker.calls == []
