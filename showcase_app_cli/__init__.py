"""Showcase app CLI - model menu catalog resolution."""
