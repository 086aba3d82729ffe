"""Data-flow detectors built on the type and alias maps."""
