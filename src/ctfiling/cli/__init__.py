"""Command line interface for ctfiling."""
