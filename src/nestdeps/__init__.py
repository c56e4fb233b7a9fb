"""nestdeps — dependency graphs for NestJS projects."""

__version__ = "0.1.0"
