"""Penguin sex classification report: bootstrap validation of two classifiers."""

__version__ = "0.1.0"
