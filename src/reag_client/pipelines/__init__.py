"""Runnable pipelines built on the ReAG client."""
