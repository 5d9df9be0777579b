"""
Unit Tests for Pipeline Module
"""

import pytest

from mapmyfirm_server.config import Settings
from mapmyfirm_server.pipeline.checklist_generator import (
    ChecklistGenerator,
    new_checklist_item,
    toggle_optimized,
    update_checklist_item,
    update_practice_area,
)
from mapmyfirm_server.pipeline.fuzzy_search import (
    SearchKey,
    WeightedFuzzySearch,
    approximate_substring_distance,
    field_norm,
)
from mapmyfirm_server.pipeline.location_matcher import (
    LocationMatcher,
    calculate_similarity,
    get_hub_nodes,
    levenshtein_distance,
    normalize_location_string,
    parse_location,
    parse_location_lines,
)
from mapmyfirm_server.pipeline.practice_areas import (
    PRACTICE_AREAS,
    PracticeAreaMatcher,
)
from mapmyfirm_server.pipeline.tree_builder import (
    build_tree,
    filter_tree,
    find_node,
    find_node_in_list,
    flatten_tree,
    get_ancestor_ids,
    get_descendants,
    group_by_type,
)
from mapmyfirm_server.schemas import ChecklistItem, GBPLocation, PracticeAreaPage, SiteNode


def make_node(node_id, title, parent_id=None, slug=None, type="page", tags=None):
    slug = slug or title.lower().replace(" ", "-")
    return SiteNode(
        id=node_id,
        title=title,
        slug=slug,
        url=f"https://abc-law.test/{slug}/",
        parent_id=parent_id,
        type=type,
        status="publish",
        manual_tags=tags or [],
    )


@pytest.fixture
def site_nodes():
    return [
        make_node("1", "Home"),
        make_node("2", "Practice Areas", parent_id="1"),
        make_node("3", "Grandchild Page", parent_id="2"),
        make_node("4", "Orphan", parent_id="99"),
        make_node("5", "Blog Post", parent_id="0", type="post", tags=["Ignore"]),
    ]


@pytest.fixture
def scenario_nodes():
    return [
        make_node("1", "Los Angeles Office", slug="los-angeles", type="location"),
        make_node("2", "Car Accident Lawyer", parent_id="1", slug="car-accident"),
    ]


@pytest.fixture
def settings():
    return Settings()


class TestTreeBuilder:
    """Tests for the tree builder helpers."""

    def test_build_tree_nests_children(self, site_nodes):
        """Test children are nested under resolvable parents."""
        tree = build_tree(site_nodes)

        assert [root.id for root in tree] == ["1", "4", "5"]
        assert [child.id for child in tree[0].children] == ["2"]
        assert [child.id for child in tree[0].children[0].children] == ["3"]

    def test_orphans_become_roots(self, site_nodes):
        """Test unresolvable and zero parents are promoted to roots."""
        tree = build_tree(site_nodes)
        root_ids = {root.id for root in tree}

        assert "4" in root_ids
        assert "5" in root_ids

    def test_flatten_is_permutation_of_input(self, site_nodes):
        """Test flatten(build(nodes)) returns every node once, without children."""
        flattened = flatten_tree(build_tree(site_nodes))

        assert sorted(flattened, key=lambda n: n.id) == sorted(site_nodes, key=lambda n: n.id)
        assert all(not hasattr(node, "children") for node in flattened)

    def test_build_tree_does_not_mutate_input(self, site_nodes):
        """Test input nodes are left untouched."""
        before = [node.model_dump() for node in site_nodes]

        build_tree(site_nodes)

        assert [node.model_dump() for node in site_nodes] == before

    def test_parent_cycle_keeps_every_node(self):
        """Test nodes in a parent cycle still appear exactly once."""
        nodes = [make_node("a", "A", parent_id="b"), make_node("b", "B", parent_id="a")]

        flattened = flatten_tree(build_tree(nodes))

        assert sorted(node.id for node in flattened) == ["a", "b"]

    def test_find_node(self, site_nodes):
        """Test lookup in a built tree and in the flat list."""
        tree = build_tree(site_nodes)

        assert find_node(tree, "3").title == "Grandchild Page"
        assert find_node(tree, "missing") is None
        assert find_node_in_list(site_nodes, "2").title == "Practice Areas"
        assert find_node_in_list(site_nodes, "missing") is None

    def test_ancestor_ids(self, site_nodes):
        """Test the parent chain is returned nearest first."""
        assert get_ancestor_ids(site_nodes, "3") == ["2", "1"]
        assert get_ancestor_ids(site_nodes, "1") == []

    def test_descendants_pre_order(self, site_nodes):
        """Test strict descendants in pre-order."""
        assert [n.id for n in get_descendants(site_nodes, "1")] == ["2", "3"]
        assert get_descendants(site_nodes, "3") == []

    def test_filter_empty_matches_nothing(self, site_nodes):
        """Test empty term and no filters yields no matches."""
        result = filter_tree(site_nodes, "   ")

        assert result.matched_node_ids == []
        assert result.expanded_ids == []

    def test_filter_expands_ancestors(self, site_nodes):
        """Test a match deep in the tree expands its ancestors."""
        result = filter_tree(site_nodes, "GRANDCHILD")

        assert result.matched_node_ids == ["3"]
        assert result.expanded_ids == ["2", "1"]

    def test_filter_by_url(self, site_nodes):
        """Test the term is also searched in the URL."""
        result = filter_tree(site_nodes, "abc-law.test/orphan")

        assert result.matched_node_ids == ["4"]

    def test_filter_by_type_and_tag(self, site_nodes):
        """Test type and tag filters apply without a term."""
        assert filter_tree(site_nodes, "", types=["post"]).matched_node_ids == ["5"]
        assert filter_tree(site_nodes, "", tags=["Ignore"]).matched_node_ids == ["5"]
        assert filter_tree(site_nodes, "home", types=["post"]).matched_node_ids == []

    def test_group_by_type(self, site_nodes):
        """Test grouping by content type."""
        groups = group_by_type(site_nodes)

        assert len(groups["page"]) == 4
        assert [n.id for n in groups["post"]] == ["5"]


class TestPracticeAreaMatcher:
    """Tests for PracticeAreaMatcher."""

    def test_descendant_title_match(self, scenario_nodes):
        """Test a descendant's title keyword marks its area as existing."""
        result = PracticeAreaMatcher().find_pages("1", scenario_nodes)

        assert result["car_accident"].exists is True
        assert result["car_accident"].page_id == "2"
        for area in PRACTICE_AREAS:
            if area != "car_accident":
                assert result[area].exists is False

    def test_grandchild_and_first_match_wins(self):
        """Test deep descendants are searched and the first match wins."""
        nodes = [
            make_node("1", "Denver", type="location"),
            make_node("2", "Services", parent_id="1"),
            make_node("3", "Wrongful Death Attorney", parent_id="2"),
            make_node("4", "Truck Accident Lawyer", parent_id="1"),
            make_node("5", "18 Wheeler Crashes", parent_id="1"),
        ]

        result = PracticeAreaMatcher().find_pages("1", nodes)

        assert result["wrongful_death"].page_id == "3"
        assert result["truck_accident"].page_id == "4"

    def test_pages_outside_subtree_ignored(self, scenario_nodes):
        """Test pages that are not under the hub do not count."""
        nodes = scenario_nodes + [make_node("9", "Truck Accident Lawyer")]

        result = PracticeAreaMatcher().find_pages("1", nodes)

        assert result["truck_accident"].exists is False

    def test_unknown_hub_all_false(self, scenario_nodes):
        """Test an unknown hub gives a well-formed all-false record."""
        result = PracticeAreaMatcher().find_pages("missing", scenario_nodes)

        assert set(result) == set(PRACTICE_AREAS)
        assert not any(page.exists for page in result.values())

    def test_idempotent(self, scenario_nodes):
        """Test repeated calls give identical records."""
        matcher = PracticeAreaMatcher()

        assert matcher.find_pages("1", scenario_nodes) == matcher.find_pages("1", scenario_nodes)

    def test_check_page_exists(self, scenario_nodes):
        """Test the single-area variant."""
        matcher = PracticeAreaMatcher()

        assert matcher.check_page_exists("1", scenario_nodes, "car_accident").page_id == "2"
        assert matcher.check_page_exists(None, scenario_nodes, "car_accident").exists is False
        with pytest.raises(ValueError):
            matcher.check_page_exists("1", scenario_nodes, "divorce")


class TestFuzzySearch:
    """Tests for WeightedFuzzySearch."""

    def test_approximate_substring_distance(self):
        """Test edit distance against the best substring."""
        assert approximate_substring_distance("abc", "xxabcxx") == 0
        assert approximate_substring_distance("abd", "xxabcxx") == 1
        assert approximate_substring_distance("abc", "") == 3

    def test_field_norm(self):
        """Test longer fields get a smaller norm."""
        assert field_norm("denver") == 1.0
        assert field_norm("Los Angeles Office") == 0.577

    def test_search_orders_best_first(self):
        """Test the exact match outranks a near match."""
        items = [
            {"title": "Denvers Place", "slug": "x"},
            {"title": "Denver", "slug": "denver"},
        ]
        search = WeightedFuzzySearch(
            items,
            [SearchKey("title", 0.5), SearchKey("slug", 0.3)],
            getter=lambda item, key: item.get(key),
        )

        results = search.search("Denver")

        assert results[0].item["title"] == "Denver"
        assert results[0].score < results[1].score

    def test_threshold_rejects_distant_text(self):
        """Test fields beyond the threshold do not match."""
        search = WeightedFuzzySearch(
            [{"title": "Los Angeles Office"}],
            [SearchKey("title")],
            getter=lambda item, key: item.get(key),
        )

        assert search.search("Miami") == []

    def test_requires_keys(self):
        """Test a search without keys is rejected."""
        with pytest.raises(ValueError):
            WeightedFuzzySearch([], [])


class TestLocationNormalizer:
    """Tests for location string helpers."""

    def test_normalize(self):
        """Test whitespace and comma normalization."""
        assert normalize_location_string("  San   Francisco ,CA") == "San Francisco, CA"

    @pytest.mark.parametrize("raw", [
        "  San   Francisco ,CA",
        "Austin,TX ,  USA",
        "Denver",
        "Trailing,",
        "",
    ])
    def test_normalize_idempotent(self, raw):
        """Test normalize(normalize(s)) == normalize(s)."""
        once = normalize_location_string(raw)

        assert normalize_location_string(once) == once

    def test_parse_location(self):
        """Test city/state split."""
        parsed = parse_location("Austin,  TX")

        assert parsed.city == "Austin"
        assert parsed.state == "TX"
        assert parse_location("Austin") is None

    def test_parse_location_lines(self):
        """Test blank lines are dropped and lines trimmed."""
        assert parse_location_lines("Austin, TX\n\n   \n  Denver, CO  \n") == [
            "Austin, TX",
            "Denver, CO",
        ]


class TestLocationMatcher:
    """Tests for LocationMatcher."""

    def test_scenario_match(self, settings, scenario_nodes):
        """Test "Los Angeles, CA" matches the Los Angeles hub at 100."""
        [location] = LocationMatcher(settings).match_locations(
            ["Los Angeles, CA"], scenario_nodes
        )

        assert location.matched_hub_id == "1"
        assert location.confidence_score == 100
        assert location.location_string == "Los Angeles, CA"
        assert location.manual_override is False

    def test_identical_title_confidence_100(self, settings):
        """Test a query identical to a hub title scores 100."""
        nodes = [make_node("7", "Denver", type="office")]

        [location] = LocationMatcher(settings).match_locations(["Denver"], nodes)

        assert location.matched_hub_id == "7"
        assert location.confidence_score == 100

    def test_no_candidates(self, settings):
        """Test zero hub candidates leaves every location unmatched."""
        nodes = [make_node("1", "Home")]

        locations = LocationMatcher(settings).match_locations(["Denver, CO", "Austin"], nodes)

        assert [loc.matched_hub_id for loc in locations] == [None, None]
        assert [loc.confidence_score for loc in locations] == [0, 0]

    def test_no_qualifying_candidate(self, settings, scenario_nodes):
        """Test a location unlike every hub is unmatched."""
        [location] = LocationMatcher(settings).match_locations(["Miami, FL"], scenario_nodes)

        assert location.matched_hub_id is None
        assert location.confidence_score == 0

    def test_typo_still_matches(self, settings, scenario_nodes):
        """Test a near miss matches with reduced confidence."""
        [location] = LocationMatcher(settings).match_locations(["Los Angelos, CA"], scenario_nodes)

        assert location.matched_hub_id == "1"
        assert 0 < location.confidence_score < 100

    def test_locations_may_share_hub(self, settings, scenario_nodes):
        """Test matching is independent per location."""
        locations = LocationMatcher(settings).match_locations(
            ["Los Angeles, CA", "los angeles"], scenario_nodes
        )

        assert [loc.matched_hub_id for loc in locations] == ["1", "1"]
        assert locations[0].id != locations[1].id

    def test_hub_candidates(self):
        """Test tag, configured type and built-in types select hubs."""
        nodes = [
            make_node("1", "Tagged", tags=["Location Hub"]),
            make_node("2", "Custom", type="city"),
            make_node("3", "Branch", type="branch"),
            make_node("4", "Plain"),
        ]

        assert [n.id for n in get_hub_nodes(nodes)] == ["1", "3"]
        assert [n.id for n in get_hub_nodes(nodes, "city")] == ["1", "2", "3"]

    def test_levenshtein(self):
        """Test the classic edit distance."""
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("flaw", "lawn") == 2

    def test_calculate_similarity(self):
        """Test exact, containment and edit-distance similarity."""
        assert calculate_similarity("Denver", "denver") == 100
        assert calculate_similarity("Denver", "Denver Office") == 80
        assert calculate_similarity("kitten", "sitting") == pytest.approx(400 / 7)

    def test_find_best_match(self, settings, scenario_nodes):
        """Test the pairwise re-match path."""
        result = LocationMatcher(settings).find_best_match("Los Angeles, CA", scenario_nodes)

        assert result.hub_id == "1"
        # slug "los-angeles" is one edit away from "los angeles"
        assert result.confidence == 91


class TestChecklistGenerator:
    """Tests for ChecklistGenerator and manual edits."""

    def test_scenario_checklist(self, settings, scenario_nodes):
        """Test the end-to-end scan → match → checklist scenario."""
        locations = LocationMatcher(settings).match_locations(["Los Angeles, CA"], scenario_nodes)

        [item] = ChecklistGenerator().generate(locations, scenario_nodes)

        assert item.hub_exists is True
        assert item.hub_id == "1"
        assert item.practice_areas["car_accident"].exists is True
        assert item.practice_areas["car_accident"].page_id == "2"
        assert sum(page.exists for page in item.practice_areas.values()) == 1
        assert item.notes == ""
        assert item.completed is False
        assert item.last_updated

    def test_unmatched_location(self, scenario_nodes):
        """Test a location without a hub gets an all-false row."""
        location = GBPLocation(id="x", location_string="Miami, FL")

        [item] = ChecklistGenerator().generate([location], scenario_nodes)

        assert item.hub_exists is False
        assert set(item.practice_areas) == set(PRACTICE_AREAS)
        assert not any(page.exists for page in item.practice_areas.values())

    def test_stats_empty(self):
        """Test an empty checklist has zero percentages."""
        stats = ChecklistGenerator().calculate_stats([])

        assert stats.total == 0
        assert stats.total_required == 0
        assert stats.overall_percentage == 0
        assert stats.completion_percentage == 0
        assert stats.hubs_percentage == 0

    def test_stats_all_complete(self):
        """Test N fully covered locations reach 100%."""
        items = [
            ChecklistItem(
                id=str(i),
                location=f"City {i}",
                hub_id=str(i),
                hub_exists=True,
                practice_areas={area: PracticeAreaPage(exists=True) for area in PRACTICE_AREAS},
                last_updated="2026-01-01T00:00:00+00:00",
            )
            for i in range(3)
        ]

        stats = ChecklistGenerator().calculate_stats(items)

        assert stats.total_required == 3 * 9
        assert stats.total_exists == 3 * 9
        assert stats.overall_percentage == 100
        assert all(count == 3 for count in stats.practice_area_counts.values())

    def test_stats_partial(self):
        """Test percentages for a partly covered checklist."""
        item = new_checklist_item("Denver, CO")
        item = update_practice_area(item, "car_accident", manual_url="https://x.test/car")
        item = item.model_copy(update={"hub_exists": True, "completed": True})
        other = new_checklist_item("Austin, TX")

        stats = ChecklistGenerator().calculate_stats([item, other])

        assert stats.total_required == 18
        assert stats.total_exists == 2
        assert stats.overall_percentage == 11
        assert stats.completion_percentage == 50
        assert stats.hubs_percentage == 50
        assert stats.practice_area_counts["car_accident"] == 1

    def test_update_practice_area(self):
        """Test a manual cell edit replaces the record."""
        item = new_checklist_item("Denver, CO")

        updated = update_practice_area(
            item, "slip_and_fall", page_id="42", comment="Needs photos", optimized=True
        )
        cell = updated.practice_areas["slip_and_fall"]

        assert cell.exists is True
        assert cell.page_id == "42"
        assert cell.manual_url is None
        assert cell.manual_override is True
        assert cell.comment == "Needs photos"
        assert cell.optimized is True
        assert item.practice_areas["slip_and_fall"].exists is False

    def test_update_practice_area_rejects_both_targets(self):
        """Test page id and manual URL are mutually exclusive."""
        item = new_checklist_item("Denver, CO")

        with pytest.raises(ValueError):
            update_practice_area(item, "car_accident", page_id="1", manual_url="https://x.test")
        with pytest.raises(ValueError):
            update_practice_area(item, "divorce", page_id="1")

    def test_toggle_optimized(self):
        """Test optimized flips without touching existence."""
        item = new_checklist_item("Denver, CO")

        toggled = toggle_optimized(item, "wrongful_death")

        assert toggled.practice_areas["wrongful_death"].optimized is True
        assert toggled.practice_areas["wrongful_death"].exists is False
        assert toggle_optimized(toggled, "wrongful_death").practice_areas["wrongful_death"].optimized is False

    def test_update_checklist_item(self):
        """Test notes/completed updates refresh last_updated."""
        item = new_checklist_item("Denver, CO").model_copy(update={"last_updated": "old"})

        updated = update_checklist_item(item, notes="Call client", completed=True)

        assert updated.notes == "Call client"
        assert updated.completed is True
        assert updated.last_updated != "old"
        with pytest.raises(ValueError):
            update_checklist_item(item, colour="red")
        with pytest.raises(ValueError):
            update_checklist_item(item, completed="maybe")
