"""Tests for the smartctl metric translator and sample rendering."""

from __future__ import annotations

from smartctl_exporter.core.models import Device
from smartctl_exporter.metrics.samples import COUNTER, MetricSample, SampleBuffer
from smartctl_exporter.metrics.translator import SmartctlMetricTranslator

SDA = Device("/dev/sda", "sda", "sat")
NVME = Device("/dev/nvme0", "nvme0", "nvme")

ATA_RESULT = {
    "smartctl": {"exit_status": 0},
    "device": {"name": "/dev/sda", "type": "sat", "protocol": "ATA"},
    "model_family": "Samsung based SSDs",
    "model_name": "Samsung SSD 860 EVO 500GB",
    "serial_number": "S3Z1NB0K123456",
    "firmware_version": "RVT02B6Q",
    "user_capacity": {"blocks": 976773168, "bytes": 500107862016},
    "smart_status": {"passed": True},
    "temperature": {"current": 31},
    "power_on_time": {"hours": 100},
    "power_cycle_count": 42,
    "ata_smart_error_log": {"summary": {"revision": 1, "count": 0}},
    "ata_smart_attributes": {
        "revision": 1,
        "table": [
            {
                "id": 5,
                "name": "Reallocated_Sector_Ct",
                "value": 100,
                "worst": 100,
                "thresh": 10,
                "raw": {"value": 0, "string": "0"},
            },
            {"id": 9, "name": "Power_On_Hours", "value": 99},
            {"name": "missing_id", "value": 1},
        ],
    },
}

NVME_RESULT = {
    "smartctl": {"exit_status": 0},
    "device": {"protocol": "NVMe"},
    "model_name": "WDC WDS500G2B0C",
    "smart_status": {"passed": False},
    "nvme_smart_health_information_log": {
        "percentage_used": 3,
        "available_spare": 100,
        "media_errors": 0,
    },
}


def _translate(device: Device, result: dict) -> SampleBuffer:
    buffer = SampleBuffer()
    SmartctlMetricTranslator().translate(device, result, buffer)
    return buffer


def test_ata_result_produces_health_and_attribute_metrics() -> None:
    buffer = _translate(SDA, ATA_RESULT)

    assert buffer.value("smartctl_device_smart_status", device="sda") == 1.0
    assert buffer.value("smartctl_device_exit_status", device="sda") == 0.0
    assert (
        buffer.value("smartctl_device_temperature", device="sda", temperature_type="current")
        == 31.0
    )
    assert buffer.value("smartctl_device_power_on_seconds", device="sda") == 360000.0
    assert buffer.value("smartctl_device_power_cycle_count", device="sda") == 42.0
    assert buffer.value("smartctl_device_capacity_bytes", device="sda") == 500107862016.0
    assert (
        buffer.value(
            "smartctl_device_attribute",
            device="sda",
            attribute_name="Reallocated_Sector_Ct",
            attribute_id="5",
            attribute_value_type="thresh",
        )
        == 10.0
    )
    assert (
        buffer.value(
            "smartctl_device_attribute",
            device="sda",
            attribute_name="Power_On_Hours",
            attribute_id="9",
            attribute_value_type="worst",
        )
        is None
    )


def test_info_metric_carries_identity_labels() -> None:
    buffer = _translate(SDA, ATA_RESULT)

    assert (
        buffer.value(
            "smartctl_device",
            device="sda",
            path="/dev/sda",
            type="sat",
            kind="physical",
            protocol="ATA",
            interface="sat",
            model_family="Samsung based SSDs",
            model_name="Samsung SSD 860 EVO 500GB",
            serial_number="S3Z1NB0K123456",
            firmware_version="RVT02B6Q",
        )
        == 1.0
    )


def test_nvme_result_uses_health_log() -> None:
    buffer = _translate(NVME, NVME_RESULT)

    assert buffer.value("smartctl_device_smart_status", device="nvme0") == 0.0
    assert buffer.value("smartctl_device_percentage_used", device="nvme0") == 3.0
    assert buffer.value("smartctl_device_available_spare", device="nvme0") == 100.0
    assert buffer.value("smartctl_device_media_errors", device="nvme0") == 0.0
    assert "smartctl_device_attribute" not in buffer.names()


def test_missing_fields_are_skipped() -> None:
    buffer = _translate(SDA, {"smartctl": {"exit_status": 0}})

    assert sorted(buffer.names()) == ["smartctl_device", "smartctl_device_exit_status"]


def test_render_produces_prometheus_exposition() -> None:
    buffer = _translate(SDA, ATA_RESULT)
    buffer(MetricSample("smartctl_devices", 1, {}, "Number of devices"))

    text = buffer.render(include_process=False).decode()

    assert "# TYPE smartctl_devices gauge" in text
    assert "smartctl_devices 1.0" in text
    assert 'smartctl_device_smart_status{device="sda"} 1.0' in text
    assert 'smartctl_device_power_cycle_count{device="sda"} 42.0' in text
    assert 'smartctl_device_power_on_seconds{device="sda"} 360000.0' in text
    assert 'interface="sat"' in text
    sample_lines = [line for line in text.splitlines() if not line.startswith("#")]
    assert not [line for line in sample_lines if "_total" in line]


def test_same_labels_overwrite_previous_sample() -> None:
    buffer = SampleBuffer()

    buffer(MetricSample("smartctl_devices", 1, {}))
    buffer(MetricSample("smartctl_devices", 2, {}))

    assert len(buffer) == 1
    assert buffer.value("smartctl_devices") == 2.0


def test_counter_type_is_kept_from_first_sample() -> None:
    buffer = SampleBuffer()
    buffer(MetricSample("smartctl_scrapes", 1, {}, "Scrapes", COUNTER))

    families = list(buffer.families())

    assert families[0].type == "counter"
