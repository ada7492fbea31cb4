from explorer.search.matcher import filter_transactions, matches
from explorer.search.parser import parse_query

__all__ = ["filter_transactions", "matches", "parse_query"]
