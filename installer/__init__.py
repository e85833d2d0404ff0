"""
Installation phases: system update, dependencies, service account and the
OpenClaw source checkout.
"""
