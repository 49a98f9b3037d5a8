"""Tests for the parsers module."""

from pyhomerelay.models import DeviceDescriptor
from pyhomerelay.parsers import is_hub_device_valid, parse_hub_device, parse_hub_devices
from tests.conftest import SAMPLE_HUB_DEVICES


class TestIsHubDeviceValid:
    """Tests for is_hub_device_valid function."""

    def test_complete_device(self) -> None:
        """Test that a device with id, title and type is valid."""
        assert is_hub_device_valid({"id": "d1", "deviceType": "switchBinary", "metrics": {"title": "Lamp"}})

    def test_missing_id(self) -> None:
        """Test that an empty id is invalid."""
        assert not is_hub_device_valid({"id": "", "deviceType": "switchBinary", "metrics": {"title": "Lamp"}})

    def test_missing_title(self) -> None:
        """Test that a device without metrics.title is invalid."""
        assert not is_hub_device_valid({"id": "d1", "deviceType": "switchBinary", "metrics": {}})
        assert not is_hub_device_valid({"id": "d1", "deviceType": "switchBinary"})

    def test_missing_device_type(self) -> None:
        """Test that a device without deviceType is invalid."""
        assert not is_hub_device_valid({"id": "d1", "metrics": {"title": "Lamp"}})

    def test_non_dict_entries(self) -> None:
        """Test that null and scalar entries are invalid."""
        assert not is_hub_device_valid(None)
        assert not is_hub_device_valid("d1")
        assert not is_hub_device_valid({"id": "d1", "deviceType": "x", "metrics": "Lamp"})


class TestParseHubDevice:
    """Tests for parse_hub_device function."""

    def test_title_fills_name_fields(self) -> None:
        """Test that the title is used as name, description and manufacturer."""
        device = parse_hub_device({"id": "d1", "deviceType": "switchBinary", "metrics": {"title": "Lamp"}})

        assert device == DeviceDescriptor(
            id="d1",
            type="switchBinary",
            name="Lamp",
            description="Lamp",
            manufacturer="Lamp",
        )


class TestParseHubDevices:
    """Tests for parse_hub_devices function."""

    def test_filters_invalid_entries(self) -> None:
        """Test that only valid entries survive, in hub order."""
        devices = parse_hub_devices(SAMPLE_HUB_DEVICES)

        assert [device.id for device in devices] == ["ZWayVDev_zway_2-0-37", "ZWayVDev_zway_3-0-38"]
        assert [device.name for device in devices] == ["Lamp", "Dimmer"]

    def test_empty_listing(self) -> None:
        """Test that an empty listing parses to an empty list."""
        assert parse_hub_devices([]) == []
