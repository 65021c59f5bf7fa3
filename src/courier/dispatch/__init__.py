"""Dispatch: endpoints and their asynchronous invocation."""
