"""Language-level detectors that run on every snippet."""
