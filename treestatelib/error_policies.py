"""
Structural issue policies for treestatelib.

Nothing the engine detects at bind time is fatal: a cycle or an
overlapping selectability configuration degrades the projection but never
corrupts state. This module lets callers decide how such issues are
surfaced, through the Policy pattern.
"""

import sys
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


class StructuralWarning(UserWarning):
    """A hierarchy or configuration violates a caller precondition.

    Issued for cycles and overlapping selection rules found at bind time.
    Also issued when a loading timer cannot be scheduled.
    """


class InvalidConfigError(ValueError):
    """Raised when a TreeConfig fails validation at bind time."""


CYCLE = 'cycle'
OVERLAPPING_RULES = 'overlapping_rules'
SCHEDULING = 'scheduling'


@dataclass(frozen=True)
class StructuralIssue:
    """One non-fatal problem found while binding a hierarchy."""
    kind: str
    message: str
    node_ids: Tuple[str, ...] = field(default=())


class StructuralPolicy(ABC):
    """
    Base class for structural issue policies.

    Subclasses implement different strategies for surfacing problems the
    controller finds while binding a hierarchy or a configuration. A policy
    must never raise: the engine keeps operating after every issue.
    """

    @abstractmethod
    def handle(self, issue: StructuralIssue) -> None:
        """
        Surface a structural issue.

        Args:
            issue: The issue that was detected
        """
        pass


class WarnPolicy(StructuralPolicy):
    """
    Policy that reports every issue through the ``warnings`` module.

    This is the default behavior. Callers can escalate with
    ``warnings.simplefilter('error', StructuralWarning)`` in tests or
    silence it with ``'ignore'``.
    """

    def __init__(self, stacklevel: int = 5):
        """
        Initialize the policy.

        Args:
            stacklevel: Passed to ``warnings.warn`` so the warning points at
                the caller that bound the hierarchy
        """
        self.stacklevel = stacklevel

    def handle(self, issue: StructuralIssue) -> None:
        """Emit a StructuralWarning."""
        warnings.warn(issue.message, StructuralWarning, stacklevel=self.stacklevel)


class CollectIssuesPolicy(StructuralPolicy):
    """
    Policy that records issues for later inspection.

    Useful for presenting every problem at once, e.g. in a validation
    report, instead of interleaving warnings with other output.
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the policy.

        Args:
            verbose: If True, also print each issue to stderr
        """
        self.issues: List[StructuralIssue] = []
        self.verbose = verbose

    def handle(self, issue: StructuralIssue) -> None:
        """Record the issue (and print it when verbose)."""
        self.issues.append(issue)
        if self.verbose:
            print(f"\nWARNING: {issue.kind}: {issue.message}", file=sys.stderr)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about issues encountered.

        Returns:
            Dictionary with issue counts per kind and the full records
        """
        by_kind: Dict[str, int] = {}
        for issue in self.issues:
            by_kind[issue.kind] = by_kind.get(issue.kind, 0) + 1
        return {
            'total_issues': len(self.issues),
            'by_kind': by_kind,
            'issues': list(self.issues),
        }

    def clear(self) -> None:
        self.issues.clear()


class IgnorePolicy(StructuralPolicy):
    """Policy that drops every issue. For callers who validate upstream."""

    def handle(self, issue: StructuralIssue) -> None:
        return None


def create_policy(strict: bool = False, verbose: bool = False) -> StructuralPolicy:
    """
    Convenience function to pick a policy.

    Args:
        strict: If True, warn (WarnPolicy); if False, collect silently
        verbose: Print collected issues to stderr (only when strict=False)

    Returns:
        A StructuralPolicy configured appropriately
    """
    if strict:
        return WarnPolicy()
    return CollectIssuesPolicy(verbose=verbose)
