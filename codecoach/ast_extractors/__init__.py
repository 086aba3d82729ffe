"""Syntax-tree helpers shared by the front end and the detectors."""
