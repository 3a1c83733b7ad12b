"""
Activations module - Device binding and cooldowns.

This module handles:
- Activation ledger (one active device per license)
- Cooldown tracking after deactivation
- Activation state machine (activate, deactivate, validate)
"""
