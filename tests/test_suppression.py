"""
Tests for the command timestamp table.
"""

from hubitat_bridge.devices.models import CapabilityKey
from hubitat_bridge.devices.suppression import CommandTimestampTable

from conftest import FakeClock


class TestCommandTimestampTable:

    def test_never_commanded_is_not_suppressed(self):
        table = CommandTimestampTable(2000, FakeClock())
        assert table.is_suppressed(CapabilityKey.ONOFF) is False
        assert table.elapsed(CapabilityKey.ONOFF) is None

    def test_window_expires_lazily(self):
        clock = FakeClock()
        table = CommandTimestampTable(2000, clock)
        table.mark([CapabilityKey.DIM])

        clock.advance_ms(500)
        assert table.is_suppressed(CapabilityKey.DIM)

        clock.now = 1001.999
        assert table.is_suppressed(CapabilityKey.DIM)

        clock.now = 1002.0
        assert not table.is_suppressed(CapabilityKey.DIM)

    def test_only_marked_keys_are_suppressed(self):
        table = CommandTimestampTable(2000, FakeClock())
        table.mark([CapabilityKey.LIGHT_HUE, CapabilityKey.LIGHT_SATURATION])

        assert table.is_suppressed(CapabilityKey.LIGHT_HUE)
        assert table.is_suppressed(CapabilityKey.LIGHT_SATURATION)
        assert not table.is_suppressed(CapabilityKey.DIM)

    def test_remark_restarts_the_window(self):
        clock = FakeClock()
        table = CommandTimestampTable(2000, clock)
        table.mark([CapabilityKey.ONOFF])
        clock.advance_ms(1500)
        table.mark([CapabilityKey.ONOFF])
        clock.advance_ms(1500)

        assert table.is_suppressed(CapabilityKey.ONOFF)
        assert table.last_command(CapabilityKey.ONOFF) == 1001.5
