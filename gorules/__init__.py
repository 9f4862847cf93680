"""Go type model, type patterns, text matchers, message rendering and core rules for Go source checks."""

__version__ = "0.3.18"