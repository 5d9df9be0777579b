"""
Pipeline Module - Scan, Match and Checklist Pipeline

Handles the flow from a WordPress site to the location checklist:
Scan → Tree → Hub matching → Practice area detection → Checklist
"""

from mapmyfirm_server.pipeline.wordpress_scanner import WordPressScanner
from mapmyfirm_server.pipeline.tree_builder import build_tree, filter_tree, flatten_tree
from mapmyfirm_server.pipeline.fuzzy_search import WeightedFuzzySearch
from mapmyfirm_server.pipeline.location_matcher import LocationMatcher
from mapmyfirm_server.pipeline.practice_areas import PracticeAreaMatcher
from mapmyfirm_server.pipeline.checklist_generator import ChecklistGenerator

__all__ = [
    "WordPressScanner",
    "build_tree",
    "filter_tree",
    "flatten_tree",
    "WeightedFuzzySearch",
    "LocationMatcher",
    "PracticeAreaMatcher",
    "ChecklistGenerator",
]
