"""Matching directives and response comparison."""

from pactverify.matching.directives import MatchingRules, build_path, decode_tree, example_of
from pactverify.matching.matcher import ResponseMatcher, match_body

__all__ = [
    "MatchingRules",
    "ResponseMatcher",
    "build_path",
    "decode_tree",
    "example_of",
    "match_body",
]
