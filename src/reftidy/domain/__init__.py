"""Reconciliation core for bibliographic records.

Every function here is synchronous and pure: it reads its arguments and
returns new values. I/O lives behind the ports in ``domain.ports``.
"""

from __future__ import annotations

from .commit import CommitResult, commit_merge
from .completeness import CompletenessReport, check_completeness
from .duplicates import (
    DuplicateGroup,
    DuplicateRecordKeyError,
    MatchPolicy,
    compute_duplicate_groups,
)
from .enrichment import (
    EnrichmentCandidate,
    Rejection,
    RejectionReason,
    fetch_candidate,
    reconcile_enrichment,
    reconcile_enrichment_report,
    validate_candidate,
)
from .issues import Issue, RecordIssues, find_issues
from .merge import (
    FieldConflict,
    InvalidMergeTransitionError,
    InvalidOverrideError,
    MergeDraft,
    MergeSession,
    MergeState,
    build_merge_draft,
)
from .similarity import similarity
from .stats import LibraryStats, compute_library_stats
from .variants import VariantGroup, find_author_variants, find_tag_variants

__all__ = [
    "CommitResult",
    "CompletenessReport",
    "DuplicateGroup",
    "DuplicateRecordKeyError",
    "EnrichmentCandidate",
    "FieldConflict",
    "InvalidMergeTransitionError",
    "InvalidOverrideError",
    "Issue",
    "LibraryStats",
    "MatchPolicy",
    "MergeDraft",
    "MergeSession",
    "MergeState",
    "RecordIssues",
    "Rejection",
    "RejectionReason",
    "VariantGroup",
    "build_merge_draft",
    "check_completeness",
    "commit_merge",
    "compute_duplicate_groups",
    "compute_library_stats",
    "fetch_candidate",
    "find_author_variants",
    "find_issues",
    "find_tag_variants",
    "reconcile_enrichment",
    "reconcile_enrichment_report",
    "similarity",
    "validate_candidate",
]
