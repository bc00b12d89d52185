"""Core functionality"""
from .copy_engine import CopyResult, reconcile, run_copy, print_summary

__all__ = ["CopyResult", "reconcile", "run_copy", "print_summary"]
