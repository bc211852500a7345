"""Tests for theme aggregation."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from stylescope.extraction.scripts import THEME_SNAPSHOT_SCRIPT
from stylescope.extraction.theme import (
    SAMPLE_SIZE,
    ThemeAggregator,
    build_selector,
    merge_css_variables,
    mode,
    parse_css_variables,
    to_dimension,
)


def sample(width, height, styles=None, tag="div", **extra):
    raw = {
        "tag": tag,
        "id": extra.pop("id", ""),
        "classes": extra.pop("classes", []),
        "rect": {"width": width, "height": height, "x": 0, "y": 0},
        "visibility": extra.pop("visibility", "visible"),
        "display": extra.pop("display", "block"),
        "computedWidth": f"{width}px",
        "computedHeight": f"{height}px",
        "styles": styles or {},
    }
    raw.update(extra)
    return raw


# =============================================================================
# Helper Tests
# =============================================================================

class TestMode:
    """Test cases for the frequency mode."""

    def test_most_frequent_wins(self):
        values = ["red"] * 6 + ["blue"] * 4
        assert mode(values) == "red"

    def test_tie_goes_to_first_seen(self):
        assert mode(["blue", "red", "red", "blue"]) == "blue"

    def test_empty(self):
        assert mode([]) is None


class TestCssVariables:
    """Test cases for custom property parsing."""

    def test_parse_style_text(self):
        variables = parse_css_variables("--brand: #ff0000; color: red; --space-2 :  8px ;")
        assert variables == {"--brand": "#ff0000", "--space-2": "8px"}

    def test_rules_override_inline(self):
        variables = merge_css_variables(
            "--brand: #ff0000; --radius: 4px",
            [("--brand", " #0000ff "), ("color", "red")],
        )
        assert variables == {"--brand": "#0000ff", "--radius": "4px"}

    def test_empty(self):
        assert merge_css_variables("", []) == {}


class TestSelectors:
    """Test cases for element identity."""

    def test_build_selector(self):
        assert build_selector("nav", "top", ["navbar", "dark"]) == "nav#top.navbar.dark"
        assert build_selector("a", None, []) == "a"

    def test_dimension_without_geometry_is_invisible(self):
        dimension = to_dimension({"tag": "HEADER", "classes": []})
        assert dimension.tag == "header"
        assert dimension.visible is False


# =============================================================================
# ThemeAggregator Tests
# =============================================================================

class TestThemeAggregator:
    """Test cases for ThemeAggregator."""

    def test_zone_first_meaningful_value_wins(self):
        aggregator = ThemeAggregator()
        zone = aggregator.aggregate_zone([
            sample(800, 60, {"background-color": "rgba(0, 0, 0, 0)", "color": "inherit"}, tag="header"),
            sample(800, 60, {"background-color": "rgb(255, 0, 0)", "color": "rgb(17, 17, 17)"}, tag="nav"),
            sample(800, 60, {"background-color": "rgb(0, 0, 255)"}, tag="nav"),
        ])

        assert zone.styles["background-color"] == "rgb(255, 0, 0)"
        assert zone.styles["color"] == "rgb(17, 17, 17)"
        assert len(zone.dimensions) == 3

    def test_zone_dimensions_skip_invisible(self):
        aggregator = ThemeAggregator()
        zone = aggregator.aggregate_zone([
            sample(800, 60, tag="header"),
            sample(0, 0, tag="nav"),
            sample(800, 60, tag="nav", display="none", styles={"color": "rgb(1, 1, 1)"}),
        ])

        assert [d.tag for d in zone.dimensions] == ["header"]
        # styles still come from hidden elements
        assert zone.styles == {"color": "rgb(1, 1, 1)"}

    def test_zone_styles_in_output(self):
        zone = ThemeAggregator().aggregate_zone([sample(100, 40, {"color": "rgb(0, 0, 0)"}, tag="a")])
        data = zone.to_dict()
        assert data["color"] == "rgb(0, 0, 0)"
        assert data["dimensions"][0]["selector"] == "a"

    def test_frequency_mode(self):
        samples = (
            [sample(50, 50, {"color": "red"}) for _ in range(6)]
            + [sample(50, 50, {"color": "blue"}) for _ in range(4)]
        )
        frequency = ThemeAggregator().aggregate_samples(samples)

        assert frequency.color == "red"
        assert frequency.background_color is None
        assert frequency.sampled_count == 10

    def test_frequency_ignores_unmeaningful_values(self):
        samples = [
            sample(50, 50, {"background-color": "rgba(0, 0, 0, 0)"}),
            sample(50, 50, {"background-color": "rgba(0, 0, 0, 0)"}),
            sample(50, 50, {"background-color": "rgb(255, 255, 255)"}),
        ]
        frequency = ThemeAggregator().aggregate_samples(samples)
        assert frequency.background_color == "rgb(255, 255, 255)"

    def test_top_twenty_by_area(self):
        samples = [sample(20 + i, 20 + i) for i in range(25)]
        frequency = ThemeAggregator().aggregate_samples(samples)

        assert len(frequency.sample_elements) == 20
        assert frequency.sample_elements[0].bounding_box.width == 44
        assert frequency.sample_elements[-1].bounding_box.width == 25

    def test_small_elements_excluded(self):
        samples = [sample(10, 10), sample(11, 11), sample(500, 5), sample(100, 100, visibility="hidden")]
        frequency = ThemeAggregator().aggregate_samples(samples)

        assert [d.bounding_box.width for d in frequency.sample_elements] == [11]

    def test_build_report(self):
        snapshot = {
            "zones": {
                "primary": [sample(1920, 3000, {"background-color": "rgb(255, 255, 255)"}, tag="body")],
                "header": [sample(1920, 80, {"font-family": "Inter, sans-serif"}, tag="header")],
            },
            "samples": [sample(50, 50, {"color": "rgb(0, 0, 0)"})],
            "totalElements": 1,
            "rootStyleText": "--brand: #123456",
            "rootRules": [["--accent", "#abcdef"]],
            "viewport": {
                "width": 1920,
                "height": 1080,
                "devicePixelRatio": 2,
                "scrollWidth": 1920,
                "scrollHeight": 3000,
            },
            "page": {"title": "Example", "url": "https://example.com/", "userAgent": "UA"},
        }

        report = ThemeAggregator().build(snapshot, extracted_at="2024-01-01T00:00:00+00:00")
        data = report.to_dict()

        assert data["primary"]["background-color"] == "rgb(255, 255, 255)"
        assert data["header"]["font-family"] == "Inter, sans-serif"
        assert data["content"] == {"dimensions": []}
        assert data["accent"] == {"dimensions": []}
        assert data["secondary"]["color"] == "rgb(0, 0, 0)"
        assert data["variables"] == {"--brand": "#123456", "--accent": "#abcdef"}
        assert data["viewport"]["devicePixelRatio"] == 2.0
        assert data["metadata"] == {
            "title": "Example",
            "url": "https://example.com/",
            "extractedAt": "2024-01-01T00:00:00+00:00",
            "userAgent": "UA",
        }

    def test_build_empty_snapshot(self):
        report = ThemeAggregator().build({})
        assert report.variables == {}
        assert report.metadata.extracted_at

    @pytest.mark.asyncio
    async def test_extract_passes_script_args(self):
        page = MagicMock()
        page.evaluate = AsyncMock(return_value={})
        aggregator = ThemeAggregator()

        await aggregator.extract(page)

        script, args = page.evaluate.call_args[0]
        assert script == THEME_SNAPSHOT_SCRIPT
        assert args["sampleSize"] == SAMPLE_SIZE
        assert args["sampleProperties"] == ["color", "background-color", "font-family"]
        assert set(args["zones"]) == {"primary", "header", "content", "accent"}
