"""Unit tests for snapshot comparison."""

from collections.abc import Callable

from heft.core.diff import DiffKind, compare
from heft.models.finding import UINT64_MAX, BloatCategory, Finding, Location


class TestCompare:
    """Tests for compare()."""

    def test_new_entry(self, make_finding: Callable[..., Finding]) -> None:
        """An item only in the newer scan is New with a positive delta."""
        result = compare([], [make_finding("a", 100)])

        (entry,) = result.entries
        assert entry.kind == DiffKind.NEW
        assert entry.old_size == 0
        assert entry.delta == 100
        assert result.net_change == 100

    def test_gone_entry(self, make_finding: Callable[..., Finding]) -> None:
        """An item only in the older scan is Gone with a negative delta."""
        result = compare([make_finding("a", 100)], [])

        (entry,) = result.entries
        assert entry.kind == DiffKind.GONE
        assert entry.new_size == 0
        assert entry.delta == -100

    def test_unchanged_entry_omitted(self, make_finding: Callable[..., Finding]) -> None:
        """Unchanged items produce no entry."""
        result = compare([make_finding("a", 100)], [make_finding("a", 100)])
        assert result.entries == ()
        assert result.net_change == 0
        assert result.has_changes is False

    def test_grew_and_shrank(self, make_finding: Callable[..., Finding]) -> None:
        """Size changes are classified by sign."""
        result = compare(
            [make_finding("a", 100), make_finding("b", 100)],
            [make_finding("a", 150), make_finding("b", 40)],
        )
        kinds = {e.name: (e.kind, e.delta) for e in result.entries}
        assert kinds == {"a": (DiffKind.GREW, 50), "b": (DiffKind.SHRANK, -60)}

    def test_mixed_scenario(self, make_finding: Callable[..., Finding]) -> None:
        """Grew, Gone and New in one comparison sum to the net change."""
        result = compare(
            [make_finding("a", 100), make_finding("b", 200)],
            [make_finding("a", 150), make_finding("c", 50)],
        )

        assert len(result.by_kind(DiffKind.GREW)) == 1
        assert result.by_kind(DiffKind.GREW)[0].name == "a"
        assert [e.name for e in result.by_kind(DiffKind.GONE)] == ["b"]
        assert [e.name for e in result.by_kind(DiffKind.NEW)] == ["c"]
        assert result.net_change == -100

    def test_identity_ignores_path(self, make_finding: Callable[..., Finding]) -> None:
        """The same project at a new path is the same item."""
        old = make_finding("web", 100, location=Location.path("/old/web/node_modules"))
        new = make_finding("web", 120, location=Location.path("/new/web/node_modules"))

        (entry,) = compare([old], [new]).entries

        assert entry.kind == DiffKind.GREW
        assert entry.delta == 20

    def test_identity_includes_category(self, make_finding: Callable[..., Finding]) -> None:
        """Same name in different categories are different items."""
        artifact = make_finding("pip", 10)
        cache = make_finding("pip", 10, category=BloatCategory.PACKAGE_CACHE)

        result = compare([artifact], [cache])

        assert {e.kind for e in result.entries} == {DiffKind.GONE, DiffKind.NEW}
        assert result.net_change == 0

    def test_order_independent(self, make_finding: Callable[..., Finding]) -> None:
        """Input order does not change the result."""
        older = [make_finding("a", 1), make_finding("b", 2), make_finding("c", 3)]
        newer = [make_finding("c", 30), make_finding("d", 4), make_finding("a", 1)]

        assert compare(older, newer) == compare(list(reversed(older)), list(reversed(newer)))

    def test_extreme_sizes_are_exact(self, make_finding: Callable[..., Finding]) -> None:
        """Deltas near the 64-bit limit do not wrap."""
        result = compare([make_finding("a", 0)], [make_finding("a", UINT64_MAX)])
        assert result.entries[0].delta == UINT64_MAX
        assert result.entries[0].kind == DiffKind.GREW

    def test_sorted_by_category_then_name(self, make_finding: Callable[..., Finding]) -> None:
        """Entries come out ordered by category then name."""
        result = compare(
            [],
            [
                make_finding("zeta", 1),
                make_finding("npm cache", 1, category=BloatCategory.PACKAGE_CACHE),
                make_finding("alpha", 1),
            ],
        )
        assert [e.name for e in result.entries] == ["npm cache", "alpha", "zeta"]

    def test_carries_snapshot_metadata(self, make_finding: Callable[..., Finding]) -> None:
        """Snapshot ids and timestamps pass through to the report."""
        result = compare(
            [],
            [make_finding("a", 1)],
            from_id=3,
            to_id=7,
            from_timestamp=1_000,
            to_timestamp=2_000,
        )
        data = result.to_dict()
        assert (data["from_id"], data["to_id"]) == (3, 7)
        assert (data["from_timestamp"], data["to_timestamp"]) == (1_000, 2_000)
        assert data["entries"][0]["kind"] == "new"
