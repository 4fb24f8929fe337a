"""
Async studio client for MediaDeck.

Drives the upload flow, the editing state machine and the library view
against the REST API. Plain asyncio and httpx; not a Django app.
"""
