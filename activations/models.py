"""Model registration for the activations app."""

from activations.infrastructure.models import Activation, CooldownPeriod  # noqa: F401
