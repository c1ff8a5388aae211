"""Package filters."""

from tandem.filters.chain import apply_filters
from tandem.filters.ignore import filter_by_ignore, should_ignore
from tandem.filters.path import filter_by_path, match_path
from tandem.filters.scope import filter_by_scope, match_scope, parse_scope

__all__ = [
    "apply_filters",
    "filter_by_ignore",
    "filter_by_path",
    "filter_by_scope",
    "match_path",
    "match_scope",
    "parse_scope",
    "should_ignore",
]
