"""Post-processing filters applied to transformed captions before formatting."""
