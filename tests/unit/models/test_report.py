"""Unit tests for ScanReport."""

from collections.abc import Callable

from heft.models.finding import UINT64_MAX, BloatCategory, Finding, Location
from heft.models.report import DetectorMetric, ScanReport


class TestScanReport:
    """Tests for ScanReport aggregation and serialization."""

    def test_totals(self, make_finding: Callable[..., Finding]) -> None:
        """total_bytes and reclaimable_bytes sum all entries."""
        report = ScanReport(
            entries=(
                make_finding("a", 100),
                make_finding("b", 300, reclaimable=0),
            )
        )
        assert report.total_bytes == 400
        assert report.reclaimable_bytes == 100

    def test_totals_saturate(self, make_finding: Callable[..., Finding]) -> None:
        """Totals clamp instead of exceeding the 64-bit range."""
        report = ScanReport(entries=(make_finding("a", UINT64_MAX), make_finding("b", 5)))
        assert report.total_bytes == UINT64_MAX

    def test_by_category_preserves_order(self, make_finding: Callable[..., Finding]) -> None:
        """Grouping keeps entry order inside each category."""
        cache = make_finding(
            "npm cache",
            10,
            category=BloatCategory.PACKAGE_CACHE,
            location=Location.path("/home/dev/.npm"),
        )
        report = ScanReport(entries=(make_finding("a", 1), cache, make_finding("b", 2)))
        groups = report.by_category()
        assert [f.name for f in groups[BloatCategory.PROJECT_ARTIFACTS]] == ["a", "b"]
        assert groups[BloatCategory.PACKAGE_CACHE] == [cache]

    def test_to_dict(self, make_finding: Callable[..., Finding]) -> None:
        """to_dict includes summary and the optional measurements."""
        report = ScanReport(
            entries=(make_finding("a", 100),),
            diagnostics=("projects: skipped (disabled)",),
            duration_ms=12,
            peak_memory_bytes=4096,
            detector_timings=(DetectorMetric("caches", 7),),
            detector_memory=(DetectorMetric("caches", 0),),
        )
        data = report.to_dict()
        assert data["summary"] == {"count": 1, "total_bytes": 100, "reclaimable_bytes": 100}
        assert data["diagnostics"] == ["projects: skipped (disabled)"]
        assert data["duration_ms"] == 12
        assert data["peak_memory_bytes"] == 4096
        assert data["detector_timings"] == [["caches", 7]]
        assert data["detector_memory"] == [["caches", 0]]

    def test_to_dict_omits_missing_measurements(self) -> None:
        """An empty report has no duration or memory keys."""
        data = ScanReport().to_dict()
        assert data["entries"] == []
        assert "duration_ms" not in data
        assert "peak_memory_bytes" not in data
