"""Scene segmentation, feature extraction and language detection."""

from parsers.features import extract_features
from parsers.language import detect_language, determine_format
from parsers.scene_heading import parse_scene_heading
from parsers.scene_splitter import merge_and_filter, segment, split_into_scenes
from parsers.structure import extract_structure

__all__ = [
    "segment",
    "split_into_scenes",
    "merge_and_filter",
    "extract_features",
    "detect_language",
    "determine_format",
    "extract_structure",
    "parse_scene_heading",
]
