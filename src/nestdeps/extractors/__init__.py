"""Extractors that turn source files into graph data."""
