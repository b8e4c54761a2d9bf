"""Game show domain services: entity store, access gate and round timing.

Blueprints and socket handlers reach these through the app's extensions;
nothing here depends on request or socket context.
"""
