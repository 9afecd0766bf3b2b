"""Promptcraft relay - FastAPI REST API layer.

Modules
-------
main
    FastAPI application with the generate-image route and the ``main()``
    CLI entry point.
models
    Pydantic models for the options record and response bodies.
upstream
    Async client for the upstream image-generation API and its status
    mapping.
"""
