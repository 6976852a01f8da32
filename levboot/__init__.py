"""
levboot — bootstrap orchestrator for the Levanter bot on Termux.

Runs an ordered list of idempotent provisioning steps (system packages,
git clone, Node dependencies, config.env, autostart) with explicit
fatal / warn-and-continue failure policies.
"""

__version__ = "0.1.0"
