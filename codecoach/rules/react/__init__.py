"""React detectors, run only when the snippet uses React."""
