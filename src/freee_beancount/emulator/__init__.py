"""Local emulator of the freee accounting API."""

from freee_beancount.emulator.app import create_app
from freee_beancount.emulator.store import EmulatorStore

__all__ = ["create_app", "EmulatorStore"]
