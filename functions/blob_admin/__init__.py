"""
Blob admin service.

This package provides a FastAPI application exposing the serverless-style
``me`` and ``uploadBlobs`` functions, plus an async upload orchestrator that
restores JSON snapshots (records, users, stats) into the blob store.
"""
