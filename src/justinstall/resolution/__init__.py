"""Candidate resolution: extension rules, compatibility scoring and script heuristics."""
