"""Operator tools: wipe, squash and the command line entry points."""
