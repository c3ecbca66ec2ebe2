"""Workflow file extraction and rewriting."""

from .document import Workflow, parse_entities, rewrite_uses

__all__ = ["Workflow", "parse_entities", "rewrite_uses"]
