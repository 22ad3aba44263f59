"""Tests for HealthSnapshot parsing."""

import pytest

from vault_exporter.metrics import HealthSnapshot


def test_from_json_reads_all_fields():
    snap = HealthSnapshot.from_json({
        "initialized": True,
        "sealed": False,
        "standby": True,
        "version": "1.2.3",
        "cluster_name": "prod-a",
        "cluster_id": "abc-1",
        "server_time_utc": 1700000000,
    })
    assert snap == HealthSnapshot(
        initialized=True, sealed=False, standby=True,
        version="1.2.3", cluster_name="prod-a", cluster_id="abc-1",
    )


def test_cluster_fields_default_to_empty_on_sealed_node():
    snap = HealthSnapshot.from_json(
        {"initialized": True, "sealed": True, "standby": True, "version": "1.4.0"}
    )
    assert snap.cluster_name == ""
    assert snap.cluster_id == ""


def test_missing_flag_rejected():
    with pytest.raises(ValueError, match="sealed"):
        HealthSnapshot.from_json({"initialized": True, "standby": False, "version": "1.0.0"})


def test_missing_version_rejected():
    with pytest.raises(ValueError, match="version"):
        HealthSnapshot.from_json({"initialized": True, "sealed": False, "standby": False})


def test_non_boolean_flag_rejected():
    with pytest.raises(ValueError, match="initialized"):
        HealthSnapshot.from_json(
            {"initialized": "yes", "sealed": False, "standby": False, "version": "1.0.0"}
        )


def test_non_object_rejected():
    with pytest.raises(ValueError):
        HealthSnapshot.from_json(["initialized"])


def test_summary_is_plain_dict():
    snap = HealthSnapshot(True, False, False, "1.4.0", "c1", "id1")
    assert snap.summary() == {
        "initialized": True,
        "sealed": False,
        "standby": False,
        "version": "1.4.0",
        "cluster_name": "c1",
        "cluster_id": "id1",
    }


@pytest.mark.parametrize("version", [None, 140, ["1.4.0"]])
def test_non_string_version_rejected(version):
    with pytest.raises(ValueError, match="version"):
        HealthSnapshot.from_json(
            {"initialized": True, "sealed": False, "standby": False, "version": version}
        )
