"""Line provenance reconstruction engine.

This package walks a repository's history backward along first parents and
reconstructs, for every line that existed in the walked range, the commit
that introduced it and the last commit it was seen in.

Classes:
    ProvenanceReconstructor: Orchestrates a reconstruction run.
    HistoryWalker: Produces one DiffStep per walked commit.
    DiffApplier: Applies a DiffStep to the line table.
    LineTable: Per-file sequences of revision markers.

Models:
    RevisionMarker: A line position as of a specific commit.
    LineLifetime: Birth and death markers of one line.
    DiffStep: A commit, its parent and their per-path diffs.
"""

from longevity.provenance._applier import DiffApplier
from longevity.provenance._models import DiffStep, LineLifetime, RevisionMarker
from longevity.provenance._reconstructor import (
    ProvenanceReconstructor,
    collect_lines,
    reconstruct,
)
from longevity.provenance._table import LineTable
from longevity.provenance._walker import HistoryWalker

__all__ = [
    "DiffApplier",
    "DiffStep",
    "HistoryWalker",
    "LineLifetime",
    "LineTable",
    "ProvenanceReconstructor",
    "RevisionMarker",
    "collect_lines",
    "reconstruct",
]
