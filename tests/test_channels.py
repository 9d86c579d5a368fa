"""Tests for sensor id and beacon id channel mapping."""

import pytest

from frigo.telemetry.channels import extract_channel_number, fold_channel, match_beacon_id


class TestExtractChannelNumber:
    @pytest.mark.parametrize(
        "sensor_id,expected",
        [
            ("S-CH12", 12),
            ("S-CH2", 2),
            ("frigo-ch3", 3),
            ("uT4R", 4),
            ("sensor5", 5),
        ],
    )
    def test_sensor_id_forms(self, sensor_id, expected):
        assert extract_channel_number(sensor_id) == expected

    def test_no_digits_is_none(self):
        assert extract_channel_number("SENSOR") is None

    def test_empty_id_is_none(self):
        assert extract_channel_number("") is None
        assert extract_channel_number(None) is None

    def test_bare_digits_fold_onto_gateway_channels(self):
        assert extract_channel_number("sensor-15") == 7
        assert extract_channel_number("9") == 1

    def test_explicit_ch_suffix_is_not_folded(self):
        assert extract_channel_number("S-CH12") == 12

    def test_name_with_ch_wins(self):
        assert extract_channel_number("S-CH1", "Frigo CH 6") == 6

    def test_name_without_ch_is_ignored(self):
        assert extract_channel_number("S-CH2", "Chambre 7") == 2


def test_fold_channel():
    assert fold_channel(3) == 3
    assert fold_channel(8) == 8
    assert fold_channel(16) == 8
    assert fold_channel(17) == 1


class TestMatchBeaconId:
    def test_chambre_pattern(self):
        assert match_beacon_id("Chambre3", 3) == "chambre3"

    def test_spaced_pattern(self):
        assert match_beacon_id("ROOM 4", 4) == "room 4"

    def test_short_pattern(self):
        assert match_beacon_id("c2", 2) == "c2"

    def test_other_channel_does_not_match(self):
        assert match_beacon_id("Chambre3", 5) is None

    def test_longer_number_does_not_match(self):
        assert match_beacon_id("chambre12", 1) is None
        assert match_beacon_id("chambre12", 12) == "chambre12"
