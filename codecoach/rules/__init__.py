"""Syntax-tree detectors for coaching findings."""
