"""ctfiling command groups."""
