"""
Custom exceptions for item resolution.

Provides specific error types for the failure modes of the pipeline: the
wiki being unreachable, the store rejecting a query, and a statistic whose
numeric value cannot be read.
"""


class EqItemsError(Exception):
    pass


class WikiError(EqItemsError):
    pass


class StoreError(EqItemsError):
    pass


class ParseError(EqItemsError):
    def __init__(self, line: str, token: str):
        self.line = line
        self.token = token
        super().__init__(f"Cannot read numeric value {token!r} in line {line!r}")
