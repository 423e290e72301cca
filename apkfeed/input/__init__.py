"""
Input parsing for content-repository exports.
"""

from .json_parser import parse_items_json, results_to_json

__all__ = ["parse_items_json", "results_to_json"]
