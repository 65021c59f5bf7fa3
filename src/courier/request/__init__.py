"""Request pipeline: ongoing requests, matching, and hand-off to dispatch."""
