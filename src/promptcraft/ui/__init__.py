"""Gradio client for Promptcraft.

The UI gathers a prompt, option presets and reference images, and hands them
to a per-session :class:`~promptcraft.ui.orchestrator.GenerationOrchestrator`
that talks to the relay.
"""
