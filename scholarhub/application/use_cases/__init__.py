"""Use cases exposed to the interface layer and scripts."""
