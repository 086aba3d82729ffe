"""External linters whose findings merge into the analysis."""
