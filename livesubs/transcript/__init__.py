"""Transcript reconciliation."""

from .reconciler import ReconcileMode, TranscriptReconciler, TranscriptState, flush, merge_window, reconcile

__all__ = ["ReconcileMode", "TranscriptReconciler", "TranscriptState", "flush", "merge_window", "reconcile"]
